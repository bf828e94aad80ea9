from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

"""Heat and Operation domain models.

An ``Operation`` is one stage visit by a heat with absolute timestamps.
Durations and idle times are filled in by the derived-field calculator;
the temporal resolver leaves them at 0.
"""

__all__ = [
    "Heat",
    "Operation",
]


@dataclass(frozen=True)
class Operation:
    """One stage visit (``end_time > start_time`` always holds)."""
    unit: str  # 設備コード (upper case, e.g. BOF2)
    group: str  # KR / BOF / LF / CASTER
    sequence_order: float  # explicit seq or canonical stage order
    start_time: datetime
    end_time: datetime
    raw_index: int  # 元行番号 (tie-break 用)
    duration_minutes: int = 0
    idle_time_minutes: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "unit": self.unit,
            "group": self.group,
            "sequenceOrder": self.sequence_order,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "durationMinutes": self.duration_minutes,
            "idleTimeMinutes": self.idle_time_minutes,
        }


@dataclass(frozen=True)
class Heat:
    """A validated production batch.

    Only heats that passed every blocking rule are built. ``operations`` is
    sorted by start time. ``sequence_in_caster`` stays None until the
    cross-heat sequencing step runs, and for heats that never reach a caster.
    """
    heat_id: str
    steel_grade: str
    operations: tuple[Operation, ...] = field(default_factory=tuple)
    casting_machine: str | None = None
    caster_start: datetime | None = None
    sequence_in_caster: int | None = None
    is_complete: bool = False
    total_duration_minutes: int = 0
    total_idle_minutes: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "heatId": self.heat_id,
            "steelGrade": self.steel_grade,
            "castingMachine": self.casting_machine,
            "sequenceInCaster": self.sequence_in_caster,
            "isComplete": self.is_complete,
            "totalDurationMinutes": self.total_duration_minutes,
            "totalIdleMinutes": self.total_idle_minutes,
            "operations": [op.to_dict() for op in self.operations],
        }
