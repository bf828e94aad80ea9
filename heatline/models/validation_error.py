from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from enum import Enum

"""ValidationError model: one classified data problem.

Data problems are collected as values, never raised. ``UNIT`` and
``PLACEHOLDER`` are advisory; every other kind is blocking and removes the
owning heat from the valid output.
"""

__all__ = [
    "ADVISORY_KINDS",
    "ErrorKind",
    "ValidationError",
]


class ErrorKind(str, Enum):
    FORMAT = "FORMAT"
    ROUTING = "ROUTING"
    TIME = "TIME"
    UNIT = "UNIT"
    MISSING = "MISSING"
    PLACEHOLDER = "PLACEHOLDER"


ADVISORY_KINDS = frozenset({ErrorKind.UNIT, ErrorKind.PLACEHOLDER})


@dataclass(frozen=True)
class ValidationError:
    """Classified error or warning tagged with its heat.

    Attributes:
        heat_id: Owning heat, or ``"Row N"`` when the row had no heat identifier
        kind: Error classification
        message: Human readable description
        unit: Unit code involved, if any
        op_index: Position of the row in the heat's parsing order, if any
        raw_index: 1-based source row number, if the error is tied to a row
    """
    heat_id: str
    kind: ErrorKind
    message: str
    unit: str | None = None
    op_index: int | None = None
    raw_index: int | None = None

    @property
    def is_blocking(self) -> bool:
        return self.kind not in ADVISORY_KINDS

    def to_dict(self) -> dict[str, object]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data

    def to_json_line(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)
