from typing import Iterator, List, Optional, Tuple
from .types import VerdictRecord

class EventLog:
    """
    Append-only log of verdict records for one script run.
    Optionally mirrors every record to a newline-delimited JSON file.
    """
    def __init__(self, filepath: Optional[str] = None):
        self.filepath = filepath
        self._records: List[VerdictRecord] = []
        self._file = None
        if filepath:
            # Append mode, line buffered
            self._file = open(filepath, "a", buffering=1)

    def append(self, record: VerdictRecord):
        self._records.append(record)
        if self._file is not None:
            self._file.write(record.model_dump_json() + "\n")

    def reset(self):
        """
        Starts a fresh log. Storage is replaced, never edited in place,
        so tuples handed out earlier stay valid.
        """
        self._records = []

    @property
    def records(self) -> Tuple[VerdictRecord, ...]:
        return tuple(self._records)

    def passed(self) -> int:
        return sum(1 for r in self._records if r.success)

    def failed(self) -> int:
        return sum(1 for r in self._records if not r.success)

    def __iter__(self) -> Iterator[VerdictRecord]:
        return iter(tuple(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def close(self):
        if self._file is not None:
            self._file.close()
            self._file = None

    @staticmethod
    def replay(filepath: str):
        """
        Generator over records previously written to a JSON-lines sink.
        """
        with open(filepath, "r") as f:
            for line in f:
                if line.strip():
                    yield VerdictRecord.model_validate_json(line)
