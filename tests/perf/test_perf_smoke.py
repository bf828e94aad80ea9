from __future__ import annotations

import time
from datetime import date

from heatline.services.pipeline import process_grid
from scripts.gen_schedule_dataset import generate_schedule

"""Performance smoke test: the pipeline stays well under a second per few thousand rows."""


def test_pipeline_throughput_smoke():
    grid = generate_schedule(2_000, error_rate=0.1, seed=7).values.tolist()
    start = time.perf_counter()
    result = process_grid(grid, today=date(2025, 3, 10))
    elapsed = time.perf_counter() - start

    heats = {row[1] for row in grid[1:]}
    dropped = set(result.dropped_heat_ids)
    assert {h.heat_id for h in result.valid_heats} | dropped == heats
    assert dropped
    # CI でも緩い上限
    assert elapsed < 10, f"pipeline too slow: {elapsed:.3f}s for {len(grid) - 1} rows"


def test_generated_schedule_is_clean_without_errors():
    grid = generate_schedule(200, error_rate=0.0, seed=1).values.tolist()
    result = process_grid(grid, today=date(2025, 3, 10))
    assert result.blocking_errors == []
    assert len(result.valid_heats) == 200
    assert all(h.is_complete for h in result.valid_heats)
