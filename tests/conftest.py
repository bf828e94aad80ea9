# Shared pytest fixtures
from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path
from typing import Any

import openpyxl
import pytest

from heatline.logging.init import reset_logging
from heatline.models.raw_row import RawRow

HEADER = ["Date", "Heat_ID", "Steel_Grade", "unit", "Start_Time", "End_Time"]
RUN_DAY = date(2025, 3, 10)


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """overlap_policy: reject
production_day_start_hour: 8
default_date: "2025-03-10"
error_log_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "heatline.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def make_excel(temp_workdir: Path):
    """Write a single-sheet workbook (first row = header) into data/."""
    def _make(name: str, rows: list[list[Any]]) -> Path:
        p = temp_workdir / "data" / name
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Sheet1"
        for row in rows:
            ws.append(row)
        wb.save(p)
        return p
    return _make


@pytest.fixture()
def make_row():
    """RawRow factory with auto-incrementing raw_index (first data row = 2)."""
    counter = {"n": 1}

    def _make(heat_id: str, unit: str, start: str, end: str, **kw: Any) -> RawRow:
        counter["n"] += 1
        return RawRow(
            raw_index=kw.pop("raw_index", counter["n"]),
            heat_id=heat_id,
            steel_grade=kw.pop("steel_grade", "SAE1006"),
            unit=unit,
            start_str=start,
            end_str=end,
            date_str=kw.pop("date_str", RUN_DAY.isoformat()),
            seq_num=kw.pop("seq_num", None),
        )
    return _make


@pytest.fixture()
def d7090_grid() -> list[list[Any]]:
    return [
        HEADER,
        ["2025-03-10", "D7090", "SAE1006", "BOF1", "08:00", "09:00"],
        ["2025-03-10", "D7090", "SAE1006", "LF1", "09:30", "10:30"],
        ["2025-03-10", "D7090", "SAE1006", "TSC1", "11:00", "12:00"],
    ]
