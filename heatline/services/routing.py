from __future__ import annotations

from collections.abc import Iterable

from ..models.heat import Operation
from ..models.units import BOF, GROUP_ORDER, LF
from ..models.validation_error import ErrorKind, ValidationError

"""Routing & consistency validator.

Runs on operations in authoritative order (resolved start time). Rules:

- overlap: each operation starts at or after the previous one ends (TIME)
- duplicate stage group: at most one distinct unit per group, LF excepted (ROUTING)
- missing predecessor: LF needs a BOF, and every LF starts after that BOF ends (ROUTING)

Every rule runs; all violations are returned.
"""

__all__ = [
    "MULTI_UNIT_GROUPS",
    "sort_by_start_time",
    "validate_routing",
]

# 同一グループ内で複数設備の通過を許可するグループ (LF 複数ステーション)
MULTI_UNIT_GROUPS = frozenset({LF})


def sort_by_start_time(operations: Iterable[Operation]) -> tuple[Operation, ...]:
    return tuple(sorted(operations, key=lambda op: (op.start_time, op.end_time, op.raw_index)))


def _check_overlap(heat_id: str, ops: tuple[Operation, ...]) -> list[ValidationError]:
    errors: list[ValidationError] = []
    for i in range(1, len(ops)):
        prev, cur = ops[i - 1], ops[i]
        if cur.start_time < prev.end_time:
            errors.append(ValidationError(
                heat_id=heat_id,
                kind=ErrorKind.TIME,
                message=f"Overlap: {cur.unit} starts before {prev.unit} ends.",
                unit=cur.unit,
                op_index=i,
                raw_index=cur.raw_index,
            ))
    return errors


def _check_duplicate_groups(heat_id: str, ops: tuple[Operation, ...]) -> list[ValidationError]:
    errors: list[ValidationError] = []
    for group in GROUP_ORDER:
        if group in MULTI_UNIT_GROUPS:
            continue
        units: list[str] = []
        for op in ops:
            if op.group == group and op.unit not in units:
                units.append(op.unit)
        if len(units) > 1:
            errors.append(ValidationError(
                heat_id=heat_id,
                kind=ErrorKind.ROUTING,
                message=f"Heat cannot run on several {group} units: {', '.join(units)}.",
            ))
    return errors


def _check_predecessor(heat_id: str, ops: tuple[Operation, ...]) -> list[ValidationError]:
    lf_ops = [op for op in ops if op.group == LF]
    if not lf_ops:
        return []
    bof = next((op for op in ops if op.group == BOF), None)
    if bof is None:
        return [ValidationError(
            heat_id=heat_id,
            kind=ErrorKind.ROUTING,
            message=f"LF operation ({lf_ops[0].unit}) found without a preceding BOF operation.",
            unit=lf_ops[0].unit,
            raw_index=lf_ops[0].raw_index,
        )]
    return [
        ValidationError(
            heat_id=heat_id,
            kind=ErrorKind.ROUTING,
            message=f"{lf.unit} starts before {bof.unit} ends.",
            unit=lf.unit,
            raw_index=lf.raw_index,
        )
        for lf in lf_ops
        if lf.start_time < bof.end_time
    ]


def validate_routing(
    heat_id: str, operations: tuple[Operation, ...], *, allow_overlap: bool = False
) -> list[ValidationError]:
    """Validate operations already sorted by start time."""
    errors: list[ValidationError] = []
    if not allow_overlap:
        errors.extend(_check_overlap(heat_id, operations))
    errors.extend(_check_duplicate_groups(heat_id, operations))
    errors.extend(_check_predecessor(heat_id, operations))
    return errors
