"""
Harness configuration.

One immutable config per operator session. Playback controls change the
live PlaybackState, never this object.
"""
from dataclasses import dataclass
from typing import Optional
from ..core.types import DEFAULT_DEPTH_ROWS

@dataclass(frozen=True)
class HarnessConfig:
    """
    Immutable configuration for a harness session.
    """
    delay_ms: int = 500                   # Pause between directives
    min_depth_rows: int = DEFAULT_DEPTH_ROWS
    start_paused: bool = False
    delay_step_ms: int = 100              # Increment for faster/slower controls
    log_level: str = "INFO"
    output_path: Optional[str] = None     # JSON-lines sink for verdict records

    def __post_init__(self):
        if self.delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {self.delay_ms}")
        if self.min_depth_rows < 0:
            raise ValueError(f"min_depth_rows must be >= 0, got {self.min_depth_rows}")
