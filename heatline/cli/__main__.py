from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from heatline.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from heatline.logging.init import enable_debug, log_summary, setup_logging
from heatline.services.export import errors_to_csv, heats_to_json
from heatline.services.pipeline import process_all
from heatline.services.summary import compute_stats, render_stats_lines, render_summary_line

"""CLI entrypoint.

Flow:
- Load ``.env`` then the YAML config (``--config`` > $HEATLINE_CONFIG > config/heatline.yml)
- Validate every input file independently
- Log per-file results, flush the JSON Lines error log, print SUMMARY
- Optionally write the valid heats (JSON) and the error list (CSV)
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _load_env_file(path: Path) -> None:
    """Load .env with python-dotenv; existing environment variables win."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="heatline", description="Validate steel heat schedules from Excel/CSV")
    p.add_argument("files", nargs="*", type=Path, help="Excel (.xlsx/.xlsm) or CSV files")
    p.add_argument("--config", type=Path, default=None, help="YAML config path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print header mapping & first rows then exit")
    p.add_argument("--stats", action="store_true", help="Log statistics over valid heats")
    p.add_argument("--json-out", type=Path, default=None, help="Write valid heats as JSON")
    p.add_argument("--errors-csv", type=Path, default=None, help="Write errors and warnings as CSV")
    return p.parse_args(argv)


def _resolve_config_path(args: argparse.Namespace) -> tuple[Path, bool]:
    """Return (path, required). Only the implicit default may be absent."""
    if args.config is not None:
        return args.config, True
    env_path = os.getenv("HEATLINE_CONFIG")
    if env_path:
        return Path(env_path), True
    return DEFAULT_CONFIG_PATH, False


def _inspect_data(files: list[Path]) -> int:
    from heatline.excel.headers import HEADER_ALIASES, normalize_header
    from heatline.excel.reader import ReaderError, read_sheet_grid

    for f in files:
        print(f"FILE: {f.name}")
        try:
            grid = read_sheet_grid(f)
        except ReaderError as e:
            print(f"  read_error: {e}")
            continue
        if not grid:
            print("  (empty)")
            continue
        mapping = {str(h): HEADER_ALIASES.get(normalize_header(h), "-") for h in grid[0]}
        print(f"  headers={mapping}")
        for row in grid[1:4]:
            print("  row=", [v.isoformat() if hasattr(v, "isoformat") else v for v in row])
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # 空リスト [] のときに sys.argv (pytest 引数) を読まないよう None のみ判定
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        enable_debug()
        logger.debug("debug mode enabled")

    if args.inspect_data:
        return _inspect_data(args.files)

    config_path, required = _resolve_config_path(args)
    try:
        cfg = load_config(config_path, required=required)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    logger.info(f"Validating {len(args.files)} file(s) overlap_policy={cfg.overlap_policy}")
    run = process_all(args.files, cfg)

    heats = [h for r in run.results.values() for h in r.valid_heats]
    if args.stats:
        for line in render_stats_lines(compute_stats(heats)):
            logger.info(line)
    if args.json_out is not None:
        args.json_out.write_text(heats_to_json(heats), encoding="utf-8")
        logger.info(f"heats written: {args.json_out}")
    if args.errors_csv is not None:
        errors = [e for r in run.results.values() for e in r.errors]
        args.errors_csv.write_text(errors_to_csv(errors), encoding="utf-8")
        logger.info(f"errors written: {args.errors_csv}")
    if run.error_log_path:
        logger.info(f"error log written: {run.error_log_path}")

    # log_summary が "SUMMARY " を付与するため先頭を除去
    log_summary(render_summary_line(run)[len("SUMMARY "):])

    if run.failed_files > 0 or run.has_blocking_errors:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
