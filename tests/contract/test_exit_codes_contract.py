from __future__ import annotations

from pathlib import Path

from heatline.cli import main as cli_main

"""Exit codes: 0 all clean, 2 partial failure, 1 fatal startup."""

HEADER = ["Heat_ID", "Steel_Grade", "unit", "Start_Time", "End_Time"]


def test_exit_code_fatal_startup(temp_workdir: Path, capsys):
    (temp_workdir / "config" / "heatline.yml").write_text("overlap_policy: [\n", encoding="utf-8")
    assert cli_main([]) == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_all_success_with_advisories(write_config, make_excel):
    path = make_excel("ok.xlsx", [
        HEADER,
        ["H1", "G", "BOF1", "08:00", "09:00"],
        ["H1", "G", "ZZZ", "09:00", "10:00"],
        ["H2", "G", "0", "08:00", "09:00"],
    ])
    assert cli_main([str(path)]) == 0


def test_exit_code_partial_when_a_file_fails(write_config, make_excel, temp_workdir: Path):
    ok = make_excel("ok.xlsx", [HEADER, ["H1", "G", "BOF1", "08:00", "09:00"]])
    bad = make_excel("bad.xlsx", [["Heat_ID", "unit"], ["H1", "BOF1"]])
    assert cli_main([str(ok), str(bad)]) == 2


def test_exit_code_partial_when_a_heat_is_dropped(write_config, make_excel):
    path = make_excel("ok.xlsx", [HEADER, ["H1", "G", "BOF1", "08:00", "08:00"]])
    assert cli_main([str(path)]) == 2
