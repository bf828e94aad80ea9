from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models.heat import Heat, Operation
from ..models.processing_result import DurationStats, GradeStats, OpStat, RunResult, RunStats
from ..models.units import GROUP_ORDER

"""Statistics over valid heats and SUMMARY line rendering.

SUMMARY format:
    SUMMARY files={ok}/{total} rows={rows} heats={heats} valid={valid}
    dropped={dropped} warnings={warnings} errors={errors} elapsed_sec={elapsed}
"""

__all__ = [
    "compute_stats",
    "format_number",
    "render_stats_lines",
    "render_summary_line",
]


def _round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def format_number(value: float) -> str:
    """Integers without decimals, tiny values without scientific notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if abs(value) < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def _pick(ops: Iterable[tuple[str, Operation]], longest: bool) -> OpStat | None:
    best: tuple[str, Operation] | None = None
    for heat_id, op in ops:
        if best is None:
            best = (heat_id, op)
            continue
        d, bd = op.duration_minutes, best[1].duration_minutes
        # 同値は先に出現した方を残す
        if (longest and d > bd) or (not longest and d < bd):
            best = (heat_id, op)
    if best is None:
        return None
    return OpStat(heat_id=best[0], duration_minutes=best[1].duration_minutes)


def _duration_stats(ops: Sequence[Operation]) -> DurationStats:
    if not ops:
        return DurationStats()
    durations = [op.duration_minutes for op in ops]
    return DurationStats(
        avg=_round_half_up(sum(durations) / len(durations)),
        min=min(durations),
        max=max(durations),
    )


def compute_stats(heats: Sequence[Heat]) -> RunStats:
    """Aggregate statistics for a list of valid heats."""
    count = len(heats)
    longest_heat = shortest_heat = None
    for heat in heats:
        if longest_heat is None or heat.total_duration_minutes > longest_heat.total_duration_minutes:
            longest_heat = heat
        if shortest_heat is None or heat.total_duration_minutes < shortest_heat.total_duration_minutes:
            shortest_heat = heat

    longest_by_group: dict[str, OpStat | None] = {}
    shortest_by_group: dict[str, OpStat | None] = {}
    for group in GROUP_ORDER:
        group_ops = [(h.heat_id, op) for h in heats for op in h.operations if op.group == group]
        longest_by_group[group] = _pick(group_ops, longest=True)
        shortest_by_group[group] = _pick(group_ops, longest=False)

    by_grade: dict[str, GradeStats] = {}
    grades: dict[str, list[Heat]] = {}
    for heat in heats:
        grades.setdefault(heat.steel_grade, []).append(heat)
    for grade, grade_heats in grades.items():
        by_grade[grade] = GradeStats(
            count=len(grade_heats),
            by_group={
                group: _duration_stats([op for h in grade_heats for op in h.operations if op.group == group])
                for group in GROUP_ORDER
            },
        )

    return RunStats(
        total_heats=count,
        steel_grade_count=len(grades),
        avg_processing_minutes=_round_half_up(sum(h.total_duration_minutes for h in heats) / count) if count else 0,
        avg_idle_minutes=_round_half_up(sum(h.total_idle_minutes for h in heats) / count) if count else 0,
        longest_overall=OpStat(longest_heat.heat_id, longest_heat.total_duration_minutes) if longest_heat else None,
        shortest_overall=OpStat(shortest_heat.heat_id, shortest_heat.total_duration_minutes) if shortest_heat else None,
        longest_by_group=longest_by_group,
        shortest_by_group=shortest_by_group,
        by_grade=by_grade,
    )


def _op_stat(stat: OpStat | None) -> str:
    return f"{stat.heat_id}({stat.duration_minutes}m)" if stat else "-"


def render_stats_lines(stats: RunStats) -> list[str]:
    """Human readable statistics block (one string per log line)."""
    lines = [
        f"heats={stats.total_heats} grades={stats.steel_grade_count} "
        f"avg_processing_min={stats.avg_processing_minutes} avg_idle_min={stats.avg_idle_minutes}",
        f"longest={_op_stat(stats.longest_overall)} shortest={_op_stat(stats.shortest_overall)}",
    ]
    for group in GROUP_ORDER:
        lines.append(
            f"{group}: longest={_op_stat(stats.longest_by_group.get(group))} "
            f"shortest={_op_stat(stats.shortest_by_group.get(group))}"
        )
    return lines


def render_summary_line(run: RunResult) -> str:
    """Render the SUMMARY line for a run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2025, 1, 1, tzinfo=timezone.utc)
        >>> render_summary_line(RunResult(t, t, 0.0, []))
        'SUMMARY files=0/0 rows=0 heats=0 valid=0 dropped=0 warnings=0 errors=0 elapsed_sec=0'
    """
    stats = run.file_stats
    total_files = len(stats)
    valid = sum(s.valid_heats for s in stats)
    dropped = sum(s.dropped_heats for s in stats)
    return (
        f"SUMMARY files={run.success_files}/{total_files} "
        f"rows={sum(s.rows for s in stats)} "
        f"heats={valid + dropped} "
        f"valid={valid} "
        f"dropped={dropped} "
        f"warnings={sum(s.warnings for s in stats)} "
        f"errors={sum(s.errors for s in stats)} "
        f"elapsed_sec={format_number(run.elapsed_seconds)}"
    )
