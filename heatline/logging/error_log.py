from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from heatline.models.error_record import ErrorRecord
from heatline.models.validation_error import ErrorKind

"""Run-scoped JSON Lines error log.

- Fixed record schema (``contracts/error_log_schema.json``, no extra keys)
- One ``errors-YYYYMMDD-HHMMSS.log`` (UTC) per run, created on the first
  flush that has records; a clean run leaves no file behind
- Records from every input file share the run's log
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """Collects error records of one run and writes them as JSON Lines.

    Not thread safe; files are processed serially.
    """
    def __init__(self, logs_dir: Path | str | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = Path(logs_dir) if logs_dir is not None else LOGS_DIR
        self._kinds: Counter[str] = Counter()

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)
        self._kinds[record.kind] += 1

    def extend(self, records: Iterable[ErrorRecord]) -> None:
        for record in records:
            self.append(record)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def kind_counts(self) -> dict[str, int]:
        """Records seen so far per kind (flushed ones included), in ErrorKind order."""
        return {k.value: self._kinds[k.value] for k in ErrorKind if self._kinds[k.value]}

    def flush(self) -> Path | None:
        """Write buffered records. Returns None when nothing was ever written."""
        if not self._records:
            return self._file_path
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
