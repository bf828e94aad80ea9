from __future__ import annotations

import json
import os
from pathlib import Path

from heatline.cli import main as cli_main

D7090_ROWS = [
    ["Date", "Heat_ID", "Steel_Grade", "unit", "Start_Time", "End_Time"],
    ["2025-03-10", "D7090", "SAE1006", "BOF1", "08:00", "09:00"],
    ["2025-03-10", "D7090", "SAE1006", "LF1", "09:30", "10:30"],
    ["2025-03-10", "D7090", "SAE1006", "TSC1", "11:00", "12:00"],
]


def test_cli_no_files_success(temp_workdir: Path, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY files=0/0 rows=0 heats=0 valid=0 dropped=0 warnings=0 errors=0" in out


def test_cli_explicit_missing_config_is_fatal(temp_workdir: Path, capsys):
    code = cli_main(["--config", "config/absent.yml"])
    assert code == 1
    assert "ERROR config: config file not found" in capsys.readouterr().out


def test_cli_config_from_env(temp_workdir: Path, monkeypatch, capsys):
    (temp_workdir / "config" / "other.yml").write_text("overlap_policy: allow\n", encoding="utf-8")
    monkeypatch.setenv("HEATLINE_CONFIG", "config/other.yml")
    assert cli_main([]) == 0
    assert "overlap_policy=allow" in capsys.readouterr().out


def test_cli_dotenv_sets_config(temp_workdir: Path, monkeypatch, capsys):
    monkeypatch.delenv("HEATLINE_CONFIG", raising=False)
    (temp_workdir / "config" / "dot.yml").write_text("overlap_policy: bogus\n", encoding="utf-8")
    (temp_workdir / ".env").write_text("HEATLINE_CONFIG=config/dot.yml\n", encoding="utf-8")
    try:
        assert cli_main([]) == 1
    finally:
        # load_dotenv は os.environ を直接更新する
        os.environ.pop("HEATLINE_CONFIG", None)
    assert "ERROR config: config validation failed" in capsys.readouterr().out


def test_cli_valid_file_with_exports(write_config, make_excel, temp_workdir: Path, capsys):
    path = make_excel("plan.xlsx", D7090_ROWS)
    json_out = temp_workdir / "heats.json"
    csv_out = temp_workdir / "errors.csv"
    code = cli_main([str(path), "--stats", "--json-out", str(json_out), "--errors-csv", str(csv_out)])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO plan.xlsx: rows=3 valid_heats=1 dropped_heats=0 warnings=0" in out
    assert "INFO heats=1 grades=1 avg_processing_min=180 avg_idle_min=60" in out
    assert json.loads(json_out.read_text(encoding="utf-8"))[0]["heatId"] == "D7090"
    assert csv_out.read_text(encoding="utf-8").strip() == "Heat_ID,Kind,Unit,Message"
    assert "SUMMARY files=1/1 rows=3 heats=1 valid=1 dropped=0 warnings=0 errors=0" in out
    # エラーが無ければログファイルは作られない
    assert not (temp_workdir / "logs").exists()


def test_cli_blocking_errors_exit_2(write_config, make_excel, temp_workdir: Path, capsys):
    rows = D7090_ROWS + [["2025-03-10", "D7091", "SAE1006", "BOF2", "08:00", "09:00"],
                         ["2025-03-10", "D7091", "SAE1006", "BOF3", "09:10", "10:00"]]
    path = make_excel("plan.xlsx", rows)
    code = cli_main([str(path)])
    out = capsys.readouterr().out
    assert code == 2
    assert "WARN plan.xlsx D7091 [ROUTING]" in out
    assert "dropped=1" in out
    assert "INFO error log: 1 record(s) ROUTING=1" in out
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    record = json.loads(logs[0].read_text(encoding="utf-8").splitlines()[0])
    assert record["heat_id"] == "D7091"
    assert record["kind"] == "ROUTING"


def test_cli_unreadable_file_counts_as_failed(write_config, temp_workdir: Path, capsys):
    code = cli_main([str(temp_workdir / "data" / "missing.xlsx")])
    out = capsys.readouterr().out
    assert code == 2
    assert "ERROR file: missing.xlsx: file not found" in out
    assert "SUMMARY files=0/1" in out


def test_cli_debug_shows_advisories(write_config, make_excel, capsys):
    rows = D7090_ROWS + [["2025-03-10", "D7090", "SAE1006", "XYZ9", "12:30", "13:00"]]
    path = make_excel("plan.xlsx", rows)
    code = cli_main([str(path), "--debug"])
    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG plan.xlsx D7090 [UNIT] Unknown unit 'XYZ9'." in out
    assert "warnings=1" in out


def test_cli_inspect_data(make_excel, capsys):
    path = make_excel("plan.xlsx", D7090_ROWS)
    code = cli_main([str(path), "--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "FILE: plan.xlsx" in out
    assert "'Heat_ID': 'heat_id'" in out
