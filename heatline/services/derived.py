from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import replace
from datetime import date, datetime, timedelta

from ..models.heat import Heat, Operation
from ..models.units import CASTER
from .temporal import production_day

"""Derived-field calculator and cross-heat caster sequencing.

``build_heat`` runs per heat on validated, start-sorted operations.
``assign_caster_sequence`` is a separate barrier step over the full valid
heat list: within each (casting machine, production day) cohort heats are
ranked 1..N by caster start time.
"""

__all__ = [
    "assign_caster_sequence",
    "build_heat",
    "round_minutes",
]


def round_minutes(delta: timedelta) -> int:
    """Minutes, rounded half up."""
    return math.floor(delta.total_seconds() / 60 + 0.5)


def build_heat(heat_id: str, steel_grade: str, operations: Sequence[Operation]) -> Heat:
    ops: list[Operation] = []
    prev_end: datetime | None = None
    for op in operations:
        idle = 0 if prev_end is None else round_minutes(op.start_time - prev_end)
        ops.append(replace(
            op,
            duration_minutes=round_minutes(op.end_time - op.start_time),
            idle_time_minutes=idle,
        ))
        prev_end = op.end_time

    casters = [op for op in ops if op.group == CASTER]
    # 最後のキャスター通過 (通常は 1 回のみ)
    last_caster = max(casters, key=lambda op: op.start_time) if casters else None
    return Heat(
        heat_id=heat_id,
        steel_grade=steel_grade,
        operations=tuple(ops),
        casting_machine=last_caster.unit if last_caster else None,
        caster_start=last_caster.start_time if last_caster else None,
        sequence_in_caster=None,
        is_complete=bool(casters),
        total_duration_minutes=sum(op.duration_minutes for op in ops),
        total_idle_minutes=sum(op.idle_time_minutes for op in ops),
    )


def assign_caster_sequence(heats: Sequence[Heat], day_start_hour: int = 8) -> list[Heat]:
    """Return heats (same order) with ``sequence_in_caster`` filled in.

    Ties on caster start keep input order. Heats without a caster get None.
    """
    cohorts: dict[tuple[str, date], list[tuple[datetime, int]]] = {}
    for pos, heat in enumerate(heats):
        if heat.casting_machine is None or heat.caster_start is None:
            continue
        key = (heat.casting_machine, production_day(heat.caster_start, day_start_hour))
        cohorts.setdefault(key, []).append((heat.caster_start, pos))

    ranks: dict[int, int] = {}
    for members in cohorts.values():
        for rank, (_, pos) in enumerate(sorted(members), start=1):
            ranks[pos] = rank

    return [replace(heat, sequence_in_caster=ranks.get(pos)) for pos, heat in enumerate(heats)]
