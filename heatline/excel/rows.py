from __future__ import annotations

import logging
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from ..models.raw_row import RawRow
from ..models.validation_error import ErrorKind, ValidationError
from .cells import coerce_cell, is_empty_cell
from .headers import DATE, END, HEAT_ID, SEQ_NUM, START, STEEL_GRADE, UNIT, map_headers

"""Row parser: raw 2D grid -> canonical RawRow list + row-level warnings.

Steps:
1. First grid row is the header row; map it (missing required -> raise)
2. Every following row gets ``raw_index = position + 2``
3. Fully empty rows are skipped silently
4. Placeholder rows (unit ``0`` or both times ``0:00``) -> PLACEHOLDER warning, dropped
5. Malformed times -> FORMAT warning, dropped
6. Rows without a heat identifier -> MISSING error, dropped
"""

__all__ = [
    "ParsedRows",
    "SheetHeaderError",
    "parse_rows",
]

logger = logging.getLogger(__name__)

TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_PLACEHOLDER_TIMES = frozenset({"0:00", "00:00"})


class SheetHeaderError(Exception):
    """Raised when the grid has no data row after the header."""


@dataclass
class ParsedRows:
    rows: list[RawRow] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)


def _pad_time(text: str) -> str:
    m = TIME_RE.match(text)
    if m is None:
        return text
    return f"{int(m.group(1)):02d}:{m.group(2)}"


def _to_seq_num(text: str) -> float | None:
    if text == "":
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    # "nan" / "inf" は float() を通るため除外
    return value if math.isfinite(value) else None


def parse_rows(grid: Sequence[Sequence[Any]]) -> ParsedRows:
    """Parse a raw grid into canonical rows.

    Raises:
        SheetHeaderError: fewer than 2 grid rows
        MissingColumnsError: a required field has no header
    """
    if len(grid) < 2:
        raise SheetHeaderError("sheet is empty or has no data rows")
    columns = map_headers(list(grid[0]))

    result = ParsedRows()
    for i, raw in enumerate(grid[1:]):
        raw_index = i + 2
        if all(is_empty_cell(v) for v in raw):
            continue

        values = {name: "" for name in columns.values()}
        for col, name in columns.items():
            cell = raw[col] if col < len(raw) else None
            values[name] = coerce_cell(cell, name)

        heat_id = values.get(HEAT_ID, "")
        unit = values.get(UNIT, "")
        start = values.get(START, "")
        end = values.get(END, "")
        label = heat_id or f"Row {raw_index}"

        if unit == "0" or (start in _PLACEHOLDER_TIMES and end in _PLACEHOLDER_TIMES):
            logger.debug("row %d: placeholder skipped", raw_index)
            result.warnings.append(ValidationError(
                heat_id=label,
                kind=ErrorKind.PLACEHOLDER,
                message=f"Placeholder row {raw_index} skipped (unit '0' or 0:00 times).",
                unit=unit or None,
                raw_index=raw_index,
            ))
            continue

        if (start and not TIME_RE.match(start)) or (end and not TIME_RE.match(end)):
            logger.debug("row %d: bad time format start=%r end=%r", raw_index, start, end)
            result.warnings.append(ValidationError(
                heat_id=label,
                kind=ErrorKind.FORMAT,
                message=f"Invalid time format in row {raw_index}; expected H:MM or HH:MM.",
                unit=unit or None,
                raw_index=raw_index,
            ))
            continue

        if not heat_id:
            result.warnings.append(ValidationError(
                heat_id=label,
                kind=ErrorKind.MISSING,
                message=f"Row {raw_index} has no heat identifier.",
                unit=unit or None,
                raw_index=raw_index,
            ))
            continue

        result.rows.append(RawRow(
            raw_index=raw_index,
            heat_id=heat_id,
            steel_grade=values.get(STEEL_GRADE, ""),
            unit=unit,
            start_str=_pad_time(start),
            end_str=_pad_time(end),
            date_str=values.get(DATE, ""),
            seq_num=_to_seq_num(values.get(SEQ_NUM, "")),
        ))
    return result
