from __future__ import annotations

from collections.abc import Iterable, Sequence
from functools import cmp_to_key

from ..models.raw_row import RawRow

"""Heat grouper and first-pass (parsing) order.

Grouping is stable: heats appear in order of first occurrence and rows keep
their input order inside a heat.

The parsing order only seeds the overnight-rollover heuristic of the
temporal resolver. Validation later re-sorts by resolved start time.
"""

__all__ = [
    "compare_parse_order",
    "group_by_heat",
    "parse_order",
]


def group_by_heat(rows: Iterable[RawRow]) -> dict[str, list[RawRow]]:
    groups: dict[str, list[RawRow]] = {}
    for row in rows:
        groups.setdefault(row.heat_id, []).append(row)
    return groups


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def compare_parse_order(a: RawRow, b: RawRow) -> int:
    """Explicit sequence when both rows have one, else start text, else row index.

    Start texts are zero-padded ``HH:MM`` so lexical comparison is
    chronological within a day.
    """
    if a.seq_num is not None and b.seq_num is not None and a.seq_num != b.seq_num:
        return _sign(a.seq_num - b.seq_num)
    if a.start_str != b.start_str and a.start_str and b.start_str:
        return -1 if a.start_str < b.start_str else 1
    return _sign(a.raw_index - b.raw_index)


def parse_order(rows: Sequence[RawRow]) -> list[RawRow]:
    return sorted(rows, key=cmp_to_key(compare_parse_order))
