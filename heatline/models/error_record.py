from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from .validation_error import ValidationError

"""ErrorRecord model for the JSON Lines error log.

One ErrorRecord per ValidationError of a run, stamped with the source file
and the time it was logged. ``row=-1`` marks heat-level errors that are not
tied to a single source row.

The record shape is fixed by ``contracts/error_log_schema.json``.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Source file name
        heat_id: Heat identifier (or ``Row N`` label)
        row: Source row number (1-based). -1 for heat-level errors
        kind: Error kind (FORMAT, ROUTING, TIME, UNIT, MISSING, PLACEHOLDER)
        unit: Unit code, empty string if not applicable
        message: Human readable description
    """
    timestamp: str  # ISO8601 UTC
    file: str
    heat_id: str
    row: int  # 行番号。不明な場合 -1 許容
    kind: str
    unit: str
    message: str

    @staticmethod
    def create(file: str, heat_id: str, row: int, kind: str, message: str, unit: str = "") -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            heat_id=heat_id,
            row=row,
            kind=kind,
            unit=unit,
            message=message,
        )

    @staticmethod
    def from_issue(file: str, issue: ValidationError) -> ErrorRecord:
        return ErrorRecord.create(
            file=file,
            heat_id=issue.heat_id,
            row=issue.raw_index if issue.raw_index is not None else -1,
            kind=issue.kind.value,
            message=issue.message,
            unit=issue.unit or "",
        )

    def to_json_line(self) -> str:
        # 追加キー阻止: dataclass -> dict して json.dumps
        return json.dumps(asdict(self), ensure_ascii=False)
