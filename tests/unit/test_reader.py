from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from heatline.excel.reader import ReaderError, read_sheet_grid


def test_reads_first_sheet_as_grid(make_excel):
    path = make_excel("plan.xlsx", [
        ["Heat_ID", "unit", "Start_Time"],
        ["D7090", "BOF1", "08:00"],
        ["D7091", None, "09:00"],
    ])
    grid = read_sheet_grid(path)
    assert grid[0] == ["Heat_ID", "unit", "Start_Time"]
    assert grid[1] == ["D7090", "BOF1", "08:00"]
    assert grid[2][1] is None


def test_excel_datetime_cells_become_python_datetimes(make_excel):
    path = make_excel("dates.xlsx", [["Date"], [datetime(2025, 3, 10, 0, 0)]])
    grid = read_sheet_grid(path)
    assert grid[1][0] == datetime(2025, 3, 10, 0, 0)
    assert type(grid[1][0]) is datetime


def test_csv_cells_are_kept_as_text(temp_workdir: Path):
    path = temp_workdir / "data" / "plan.csv"
    path.write_text("Heat_ID,unit,Start_Time\n007,BOF1,08:30\n\n008,LF1,9:00\n", encoding="utf-8")
    grid = read_sheet_grid(path)
    assert grid[0] == ["Heat_ID", "unit", "Start_Time"]
    assert grid[1] == ["007", "BOF1", "08:30"]
    # 空行も位置を保持する (raw_index のずれ防止)
    assert all(v in (None, "") for v in grid[2])
    assert grid[3] == ["008", "LF1", "9:00"]


def test_empty_csv_gives_empty_grid(temp_workdir: Path):
    path = temp_workdir / "data" / "empty.csv"
    path.write_text("", encoding="utf-8")
    assert read_sheet_grid(path) == []


def test_missing_file_raises(temp_workdir: Path):
    with pytest.raises(ReaderError, match="file not found"):
        read_sheet_grid(temp_workdir / "data" / "nope.xlsx")


def test_unsupported_suffix_raises(temp_workdir: Path):
    path = temp_workdir / "data" / "plan.txt"
    path.write_text("Heat_ID\n", encoding="utf-8")
    with pytest.raises(ReaderError, match="unsupported file type"):
        read_sheet_grid(path)


def test_corrupt_workbook_raises(temp_workdir: Path):
    path = temp_workdir / "data" / "broken.xlsx"
    path.write_bytes(b"this is not a zip archive")
    with pytest.raises(ReaderError, match="failed to read"):
        read_sheet_grid(path)
