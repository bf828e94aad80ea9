from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .heat import Heat
from .raw_row import RawRow
from .validation_error import ValidationError

"""Result models for a pipeline run.

``PipelineResult`` is the output contract handed to rendering/reporting
collaborators. ``FileStat`` and ``RunStats`` feed the SUMMARY line and the
statistics report of the CLI.
"""


@dataclass(frozen=True)
class PipelineResult:
    """Valid heats plus every error and warning collected on the way.

    ``errors`` is not pre-partitioned; ``blocking_errors`` and
    ``advisories`` are convenience views.
    """
    valid_heats: list[Heat]
    errors: list[ValidationError]
    rows: list[RawRow] = field(default_factory=list)  # 正規化済み行 (clean JSON export 用)

    @property
    def blocking_errors(self) -> list[ValidationError]:
        return [e for e in self.errors if e.is_blocking]

    @property
    def advisories(self) -> list[ValidationError]:
        return [e for e in self.errors if not e.is_blocking]

    @property
    def dropped_heat_ids(self) -> list[str]:
        valid = {h.heat_id for h in self.valid_heats}
        seen: list[str] = []
        for e in self.blocking_errors:
            if e.heat_id not in valid and e.heat_id not in seen:
                seen.append(e.heat_id)
        return seen


@dataclass(frozen=True)
class FileStat:
    """Per-file outcome used for the SUMMARY line."""
    file_name: str
    status: str  # success / failed
    rows: int = 0  # 正規化後の行数 (除外行を除く)
    valid_heats: int = 0
    dropped_heats: int = 0
    warnings: int = 0
    errors: int = 0
    error: str | None = None  # 構造エラー時の理由


@dataclass(frozen=True)
class OpStat:
    heat_id: str
    duration_minutes: int


@dataclass(frozen=True)
class DurationStats:
    avg: int = 0
    min: int = 0
    max: int = 0


@dataclass(frozen=True)
class GradeStats:
    count: int
    by_group: dict[str, DurationStats]


@dataclass(frozen=True)
class RunStats:
    """Aggregate statistics over valid heats."""
    total_heats: int
    steel_grade_count: int
    avg_processing_minutes: int
    avg_idle_minutes: int
    longest_overall: OpStat | None = None
    shortest_overall: OpStat | None = None
    longest_by_group: dict[str, OpStat | None] = field(default_factory=dict)
    shortest_by_group: dict[str, OpStat | None] = field(default_factory=dict)
    by_grade: dict[str, GradeStats] = field(default_factory=dict)


@dataclass(frozen=True)
class RunResult:
    """Aggregated outcome of one CLI run over several files."""
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat]
    results: dict[str, PipelineResult] = field(default_factory=dict)  # file name -> result
    error_log_path: str | None = None

    @property
    def success_files(self) -> int:
        return sum(1 for s in self.file_stats if s.status == "success")

    @property
    def failed_files(self) -> int:
        return sum(1 for s in self.file_stats if s.status != "success")

    @property
    def has_blocking_errors(self) -> bool:
        return any(s.errors for s in self.file_stats)
