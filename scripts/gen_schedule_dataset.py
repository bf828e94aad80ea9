#!/usr/bin/env python3
"""Synthetic heat schedule generator for performance testing.

Each heat runs KR (optional) -> BOF -> LF (one or two stations) -> caster,
with random durations and gaps, on consecutive production slots. A share
of heats can be corrupted on purpose (duplicate BOF, overlap, unknown unit)
so the validator has something to reject.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

HEADER = ["Date", "Heat_ID", "Steel_Grade", "unit", "Start_Time", "End_Time"]
GRADES = ["SAE1006", "SAE1008", "Q235", "SS400", "CT3"]


def _hhmm(minutes: int) -> str:
    minutes %= 24 * 60
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _heat_rows(rng: np.random.Generator, heat_id: str, grade: str, start: int, broken: bool) -> list[list[Any]]:
    plan: list[tuple[str, int]] = []
    if rng.random() < 0.5:
        plan.append((f"KR{rng.integers(1, 3)}", int(rng.integers(20, 45))))
    plan.append((f"BOF{rng.integers(1, 6)}", int(rng.integers(35, 60))))
    for lf in rng.choice(5, size=int(rng.integers(1, 3)), replace=False):
        plan.append((f"LF{lf + 1}", int(rng.integers(25, 50))))
    caster = ["BCM1", "BCM2", "BCM3", "TSC1", "TSC2"][int(rng.integers(0, 5))]
    plan.append((caster, int(rng.integers(45, 90))))

    overlap = False
    if broken:
        kind = int(rng.integers(0, 3))
        if kind == 0:
            pos = next(i for i, (unit, _) in enumerate(plan) if unit.startswith("BOF"))
            plan.insert(pos + 1, ("BOF2" if plan[pos][0] == "BOF1" else "BOF1", 30))
        elif kind == 1:
            plan.append(("XYZ9", 10))
        else:
            overlap = True

    rows: list[list[Any]] = []
    t = prev_end = start
    for i, (unit, duration) in enumerate(plan):
        if overlap and i == len(plan) - 1:
            # 直前工程の終了前に開始させる
            t = prev_end - 10
        rows.append(["", heat_id, grade, unit, _hhmm(t), _hhmm(t + duration)])
        prev_end = t + duration
        t = prev_end + int(rng.integers(5, 30))
    return rows


def generate_schedule(heats: int, *, day: str = "2025-03-10", error_rate: float = 0.05, seed: int = 42) -> pd.DataFrame:
    """Generate a schedule sheet (header included as first row)."""
    rng = np.random.default_rng(seed)
    rows: list[list[Any]] = [HEADER]
    for i in range(heats):
        # 06:00-16:00 開始。日付を跨がない
        start = 6 * 60 + (i * 37) % (10 * 60)
        heat_rows = _heat_rows(
            rng, f"D{7000 + i}", GRADES[i % len(GRADES)], start, bool(rng.random() < error_rate)
        )
        heat_rows[0][0] = day
        rows.extend(heat_rows)
    return pd.DataFrame(rows)


def write_schedule(df: pd.DataFrame, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if output_path.suffix.lower() == ".csv":
        df.to_csv(output_path, header=False, index=False)
    else:
        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Schedule", header=False, index=False)
    print(f"Created schedule: {output_path} ({len(df) - 1:,} rows)")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic heat schedules for performance testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s schedule.xlsx --heats 5000
  %(prog)s schedule.csv --heats 20000 --error-rate 0.1 --seed 7
        """,
    )
    parser.add_argument("output", type=Path, help="Output .xlsx or .csv path")
    parser.add_argument("--heats", type=int, default=5_000, help="Number of heats (default: 5,000)")
    parser.add_argument("--date", default="2025-03-10", help="Schedule date (default: 2025-03-10)")
    parser.add_argument("--error-rate", type=float, default=0.05, help="Share of corrupted heats (default: 0.05)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.heats <= 0:
        print("Error: --heats must be positive", file=sys.stderr)
        return 1
    if not 0 <= args.error_rate <= 1:
        print("Error: --error-rate must be within [0, 1]", file=sys.stderr)
        return 1

    write_schedule(generate_schedule(args.heats, day=args.date, error_rate=args.error_rate, seed=args.seed), args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
