from __future__ import annotations

import json
from datetime import date, datetime, time
from pathlib import Path

from heatline.cli import main as cli_main
from heatline.models.config_models import PipelineConfig
from heatline.models.validation_error import ErrorKind
from heatline.services.pipeline import process_all, process_file

DAY = date(2025, 3, 10)


def test_vietnamese_workbook_with_native_cells(make_excel):
    path = make_excel("kehoach.xlsx", [
        ["Ngày", "Mẻ thép", "Mác thép", "Công đoạn", "Thời gian bắt đầu", "Thời gian kết thúc", "Ghi chú"],
        [datetime(2025, 3, 10), "D7090", "SAE1006", "KR1", time(7, 0), time(7, 40), "x"],
        [datetime(2025, 3, 10), "D7090", "SAE1006", "BOF1", 0.333333333, 0.375, None],
        [datetime(2025, 3, 10), "D7090", "SAE1006", "LF2", "9:15", "10:00", None],
        [datetime(2025, 3, 10), "D7090", "SAE1006", "BCM1", "10:20", "11:50", None],
        [None, None, None, None, None, None, None],
        [datetime(2025, 3, 10), "D7091", "SAE1006", "0", "0:00", "0:00", None],
    ])
    result = process_file(path, PipelineConfig(), today=DAY)

    assert [e.kind for e in result.errors] == [ErrorKind.PLACEHOLDER]
    assert result.errors[0].raw_index == 7
    heat = result.valid_heats[0]
    assert [op.unit for op in heat.operations] == ["KR1", "BOF1", "LF2", "BCM1"]
    assert heat.operations[1].start_time == datetime(2025, 3, 10, 8, 0)
    assert heat.operations[1].end_time == datetime(2025, 3, 10, 9, 0)
    assert [op.idle_time_minutes for op in heat.operations] == [0, 20, 15, 20]
    assert heat.casting_machine == "BCM1"
    assert heat.total_duration_minutes == 40 + 60 + 45 + 90


def test_caster_sequence_across_files_is_per_file(make_excel):
    header = ["Heat_ID", "Steel_Grade", "unit", "Start_Time", "End_Time"]
    a = make_excel("a.xlsx", [header, ["A1", "G", "TSC1", "09:00", "10:00"], ["A2", "G", "TSC1", "10:30", "11:30"]])
    b = make_excel("b.xlsx", [header, ["B1", "G", "TSC1", "08:30", "09:30"]])
    run = process_all([a, b], today=DAY)
    seq = {h.heat_id: h.sequence_in_caster for r in run.results.values() for h in r.valid_heats}
    assert seq == {"A1": 1, "A2": 2, "B1": 1}


def test_overnight_schedule_sequences_within_production_day(make_excel):
    header = ["Date", "Heat_ID", "Steel_Grade", "unit", "Start_Time", "End_Time"]
    path = make_excel("night.xlsx", [
        header,
        ["2025-03-10", "N1", "G", "TSC2", "22:00", "23:00"],
        ["2025-03-11", "N2", "G", "TSC2", "01:00", "02:00"],
        ["2025-03-11", "N3", "G", "TSC2", "09:00", "10:00"],
    ])
    result = process_file(path, today=DAY)
    seq = {h.heat_id: h.sequence_in_caster for h in result.valid_heats}
    assert seq == {"N1": 1, "N2": 2, "N3": 1}


def test_csv_and_broken_file_partial_run(write_config, temp_workdir: Path, capsys):
    csv_path = temp_workdir / "data" / "plan.csv"
    csv_path.write_text(
        "Heat_ID,Steel_Grade,unit,Start_Time,End_Time\n"
        "C1,G,BOF3,08:00,09:00\n"
        "C1,G,LF3,08:30,09:30\n"
        "C2,G,BOF4,10:00,11:00\n",
        encoding="utf-8",
    )
    empty = temp_workdir / "data" / "empty.csv"
    empty.write_text("Heat_ID,Steel_Grade,unit,Start_Time,End_Time\n", encoding="utf-8")
    json_out = temp_workdir / "heats.json"

    code = cli_main([str(csv_path), str(empty), "--json-out", str(json_out)])
    out = capsys.readouterr().out

    assert code == 2
    assert "ERROR file: empty.csv: sheet is empty or has no data rows" in out
    assert "WARN plan.csv C1 [TIME]" in out
    assert "WARN plan.csv C1 [ROUTING] LF3 starts before BOF3 ends." in out
    assert [h["heatId"] for h in json.loads(json_out.read_text(encoding="utf-8"))] == ["C2"]
    assert "SUMMARY files=1/2 rows=3 heats=2 valid=1 dropped=1 warnings=0 errors=2" in out
