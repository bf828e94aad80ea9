from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

from ..excel.headers import MissingColumnsError
from ..excel.reader import ReaderError, read_sheet_grid
from ..excel.rows import SheetHeaderError, parse_rows
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import PipelineConfig
from ..models.heat import Heat
from ..models.processing_result import FileStat, PipelineResult, RunResult
from ..models.raw_row import RawRow
from ..models.validation_error import ErrorKind, ValidationError
from .derived import assign_caster_sequence, build_heat
from .grouping import group_by_heat
from .progress import ProgressTracker
from .routing import sort_by_start_time, validate_routing
from .temporal import input_base_date, resolve_heat

"""Pipeline driver: canonical rows -> validated heats + classified errors.

Per heat (independent map step):
    resolve (parsing order) -> sort by start time -> routing rules -> derived fields
After all heats (barrier):
    per-caster sequence numbering over the valid heat set

A heat with any blocking error is absent from ``valid_heats``; its errors
stay in ``errors``. Data problems never raise. Structural problems (no data
rows, missing required columns, unreadable file) raise and are wrapped in
ProcessingError at the file level.
"""

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Raised when a file cannot be processed at all."""


def _validate_heat(
    heat_id: str,
    rows: Sequence[RawRow],
    fallback_date: date,
    config: PipelineConfig,
) -> tuple[Heat | None, list[ValidationError]]:
    resolved = resolve_heat(heat_id, rows, fallback_date)
    errors = list(resolved.errors)
    if resolved.fatal:
        return None, errors

    operations = sort_by_start_time(resolved.operations)
    routing_errors = validate_routing(heat_id, operations, allow_overlap=config.allow_overlap)
    errors.extend(routing_errors)
    if routing_errors:
        logger.debug("heat %s rejected: %d routing/time error(s)", heat_id, len(routing_errors))
        return None, errors
    return build_heat(heat_id, resolved.steel_grade, operations), errors


def validate_and_transform(
    rows: Sequence[RawRow],
    config: PipelineConfig | None = None,
    *,
    today: date | None = None,
    row_errors: Sequence[ValidationError] = (),
) -> PipelineResult:
    """Validate canonical rows and build heats.

    ``today`` is the last-resort base date when no row carries a date; it
    defaults to ``config.default_date`` and then to the current date.

    ``row_errors`` are the row parser's findings; they lead the returned
    errors. A heat that lost a row to a blocking row error is rejected as a
    whole.
    """
    config = config or PipelineConfig()
    fallback = today or config.default_date or date.today()
    run_base_date = input_base_date(rows, fallback)
    # MISSING は識別子なし行 ("Row N" ラベル) のみ
    tainted = {e.heat_id for e in row_errors if e.is_blocking and e.kind is not ErrorKind.MISSING}

    valid: list[Heat] = []
    errors: list[ValidationError] = list(row_errors)
    for heat_id, heat_rows in group_by_heat(rows).items():
        heat, heat_errors = _validate_heat(heat_id, heat_rows, run_base_date, config)
        errors.extend(heat_errors)
        if heat is None:
            continue
        if heat_id in tainted:
            logger.debug("heat %s rejected: blocking row-level error(s)", heat_id)
            continue
        valid.append(heat)

    valid = assign_caster_sequence(valid, config.production_day_start_hour)
    return PipelineResult(valid_heats=valid, errors=errors, rows=list(rows))


def process_grid(
    grid: Sequence[Sequence[Any]],
    config: PipelineConfig | None = None,
    *,
    today: date | None = None,
) -> PipelineResult:
    """Parse a raw grid and validate it. Row-level warnings come first.

    Raises:
        SheetHeaderError, MissingColumnsError: malformed sheet structure
    """
    parsed = parse_rows(grid)
    return validate_and_transform(parsed.rows, config, today=today, row_errors=parsed.warnings)


def process_file(
    path: Path,
    config: PipelineConfig | None = None,
    *,
    today: date | None = None,
) -> PipelineResult:
    """Read the first sheet of ``path`` and run the pipeline on it.

    Raises:
        ProcessingError: file unreadable or sheet structure invalid
    """
    try:
        grid = read_sheet_grid(path)
        return process_grid(grid, config, today=today)
    except (ReaderError, SheetHeaderError, MissingColumnsError) as e:
        raise ProcessingError(f"{path.name}: {e}") from e


def _file_stat(path: Path, grid_rows: int, result: PipelineResult) -> FileStat:
    return FileStat(
        file_name=path.name,
        status="success",
        rows=grid_rows,
        valid_heats=len(result.valid_heats),
        dropped_heats=len(result.dropped_heat_ids),
        warnings=len(result.advisories),
        errors=len(result.blocking_errors),
    )


def process_all(
    paths: Iterable[Path],
    config: PipelineConfig | None = None,
    *,
    today: date | None = None,
) -> RunResult:
    """Process several files independently and write the error log.

    A file that fails structurally is recorded as failed; the run goes on.
    """
    config = config or PipelineConfig()
    file_paths = list(paths)
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer(config.error_log_dir)

    file_stats: list[FileStat] = []
    results: dict[str, PipelineResult] = {}
    with ProgressTracker(len(file_paths), description="Validating files") as progress:
        for path in file_paths:
            progress.start_file(path)
            try:
                result = process_file(path, config, today=today)
            except ProcessingError as e:
                logger.error("file: %s", e)
                error_log.append(ErrorRecord.create(
                    file=path.name, heat_id="", row=-1, kind="FORMAT", message=str(e)
                ))
                file_stats.append(FileStat(file_name=path.name, status="failed", error=str(e)))
                progress.finish_file(success=False)
                continue

            error_log.extend(ErrorRecord.from_issue(path.name, issue) for issue in result.errors)
            for issue in result.errors:
                if issue.is_blocking:
                    logger.warning("%s %s [%s] %s", path.name, issue.heat_id, issue.kind.value, issue.message)
                else:
                    logger.debug("%s %s [%s] %s", path.name, issue.heat_id, issue.kind.value, issue.message)

            stat = _file_stat(path, len(result.rows), result)
            logger.info(
                "%s: rows=%d valid_heats=%d dropped_heats=%d warnings=%d",
                path.name, stat.rows, stat.valid_heats, stat.dropped_heats, stat.warnings,
            )
            file_stats.append(stat)
            results[path.name] = result
            progress.set_postfix(heats=sum(s.valid_heats for s in file_stats))
            progress.finish_file(success=True)

    log_path = error_log.flush()
    if log_path is not None:
        kinds = error_log.kind_counts()
        logger.info(
            "error log: %d record(s) %s", sum(kinds.values()), " ".join(f"{k}={n}" for k, n in kinds.items())
        )
    end_time = datetime.now(UTC)
    return RunResult(
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
        results=results,
        error_log_path=str(log_path) if log_path is not None else None,
    )
