"""
Script Verdict

Result structure for one script run.
"""
from dataclasses import dataclass
from typing import Optional
from enum import Enum

class VerdictStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    ERROR = "ERROR"
    CANCELLED = "CANCELLED"

@dataclass
class ScriptVerdict:
    """
    Final verdict of a script run.
    """
    status: VerdictStatus
    script_name: str
    directives_total: int
    directives_processed: int
    passed: int = 0
    failed: int = 0
    error_message: Optional[str] = None

    def is_pass(self) -> bool:
        return self.status == VerdictStatus.PASS

    def summary(self) -> str:
        if self.status == VerdictStatus.PASS:
            return f"PASS: {self.script_name}: {self.passed} checks passed"
        elif self.status == VerdictStatus.FAIL:
            return f"FAIL: {self.script_name}: {self.failed} of {self.passed + self.failed} checks failed"
        elif self.status == VerdictStatus.CANCELLED:
            return (
                f"CANCELLED: {self.script_name}: stopped after "
                f"{self.directives_processed}/{self.directives_total} lines"
            )
        else:
            return f"ERROR: {self.script_name}: {self.error_message}"
