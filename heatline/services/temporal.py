from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from functools import reduce

from ..models.heat import Operation
from ..models.raw_row import RawRow
from ..models.units import lookup_unit
from ..models.validation_error import ErrorKind, ValidationError
from .grouping import parse_order

"""Temporal resolver: per-heat time-of-day text -> absolute timestamps.

Rows are folded in parsing order with an accumulator carrying the last
resolved end time. A start earlier than the previous end rolls forward one
day (overnight shift), and an end earlier than its own start does the same,
so ``23:00 -> 01:00`` spans midnight.

Any fatal row error (MISSING, FORMAT, TIME) marks the whole heat as fatal;
sibling rows are still resolved so that every problem gets reported.
Unknown units only produce an advisory UNIT warning.
"""

__all__ = [
    "ResolveState",
    "ResolvedHeat",
    "input_base_date",
    "parse_date",
    "parse_hhmm",
    "production_day",
    "resolve_heat",
    "resolve_step",
]

logger = logging.getLogger(__name__)

_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%d/%m/%Y", "%d-%m-%Y")
_TRAILING_TIME_RE = re.compile(r"[ T]\d{1,2}:\d{2}(:\d{2}(\.\d+)?)?$")
_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_ONE_DAY = timedelta(days=1)


def parse_date(text: str) -> date | None:
    """Parse a calendar date, ignoring a trailing time part. None if unparseable."""
    s = _TRAILING_TIME_RE.sub("", text.strip())
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def parse_hhmm(text: str) -> tuple[int, int] | None:
    m = _HHMM_RE.match(text.strip())
    if m is None:
        return None
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours, minutes


def production_day(t: datetime, start_hour: int = 8) -> date:
    """Production day of a timestamp: [start_hour, start_hour next day)."""
    return (t - timedelta(hours=start_hour)).date()


def input_base_date(rows: Iterable[RawRow], today: date) -> date:
    """First parseable date of the whole input, else ``today``."""
    for row in rows:
        if row.date_str:
            parsed = parse_date(row.date_str)
            if parsed is not None:
                return parsed
    return today


def _at(day: date, hhmm: tuple[int, int], not_before: datetime | None) -> datetime:
    t = datetime(day.year, day.month, day.day, hhmm[0], hhmm[1])
    if not_before is not None and t < not_before:
        t += _ONE_DAY
    return t


@dataclass(frozen=True)
class ResolveState:
    """Fold accumulator for one heat."""
    last_end: datetime | None = None
    operations: tuple[Operation, ...] = ()
    errors: tuple[ValidationError, ...] = ()
    fatal: bool = False

    def fail(self, error: ValidationError) -> ResolveState:
        return replace(self, errors=self.errors + (error,), fatal=True)

    def warn(self, error: ValidationError) -> ResolveState:
        return replace(self, errors=self.errors + (error,))


@dataclass(frozen=True)
class ResolvedHeat:
    heat_id: str
    steel_grade: str
    operations: tuple[Operation, ...]
    errors: tuple[ValidationError, ...]
    fatal: bool


def resolve_step(
    state: ResolveState, op_index: int, row: RawRow, base_date: date
) -> ResolveState:
    """Resolve one row against the accumulator and return the new state."""
    heat_id = row.heat_id
    unit = row.unit.strip().upper()

    def error(kind: ErrorKind, message: str) -> ValidationError:
        return ValidationError(
            heat_id=heat_id,
            kind=kind,
            message=message,
            unit=unit or None,
            op_index=op_index,
            raw_index=row.raw_index,
        )

    missing = [name for name, value in (
        ("unit", unit), ("start time", row.start_str), ("end time", row.end_str)
    ) if not value]
    if missing:
        return state.fail(error(
            ErrorKind.MISSING, f"Row {row.raw_index} is missing {', '.join(missing)}."
        ))

    info = lookup_unit(unit)
    if info is None:
        return state.warn(error(ErrorKind.UNIT, f"Unknown unit '{row.unit}'."))

    day = base_date
    if row.date_str:
        parsed_day = parse_date(row.date_str)
        if parsed_day is None:
            return state.fail(error(
                ErrorKind.FORMAT, f"Invalid date '{row.date_str}' for unit {unit}."
            ))
        day = parsed_day

    start_hhmm = parse_hhmm(row.start_str)
    if start_hhmm is None:
        return state.fail(error(
            ErrorKind.FORMAT, f"Invalid start time '{row.start_str}' for unit {unit}."
        ))
    start = _at(day, start_hhmm, state.last_end)

    end_hhmm = parse_hhmm(row.end_str)
    if end_hhmm is None:
        return state.fail(error(
            ErrorKind.FORMAT, f"Invalid end time '{row.end_str}' for unit {unit}."
        ))
    end = _at(day, end_hhmm, start)

    if end <= start:
        return state.fail(error(
            ErrorKind.TIME, f"End time must be after start time for unit {unit}."
        ))

    op = Operation(
        unit=unit,
        group=info.group,
        sequence_order=row.seq_num if row.seq_num is not None else info.order,
        start_time=start,
        end_time=end,
        raw_index=row.raw_index,
    )
    return replace(state, last_end=end, operations=state.operations + (op,))


def resolve_heat(heat_id: str, rows: Sequence[RawRow], fallback_date: date) -> ResolvedHeat:
    """Resolve all rows of one heat (rows in input order)."""
    ordered = parse_order(rows)
    base_date = input_base_date(ordered, fallback_date)
    final = reduce(
        lambda state, item: resolve_step(state, item[0], item[1], base_date),
        enumerate(ordered),
        ResolveState(),
    )
    if final.fatal:
        logger.debug("heat %s: fatal row error(s) during time resolution", heat_id)
    steel_grade = next((r.steel_grade for r in rows if r.steel_grade), "")
    return ResolvedHeat(
        heat_id=heat_id,
        steel_grade=steel_grade,
        operations=final.operations,
        errors=final.errors,
        fatal=final.fatal,
    )
