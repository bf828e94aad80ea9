from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

"""Sheet reader: Excel / CSV file -> raw 2D grid of cells.

Only the first sheet is read. The first grid row is the header row; no
header handling happens here (see ``heatline.excel.rows``).

Excel cells keep their native shapes (numbers, datetime, time); CSV cells
are read as text so that ``08:30`` or ``007`` are not reinterpreted.
"""

__all__ = [
    "EXCEL_SUFFIXES",
    "ReaderError",
    "read_sheet_grid",
]

EXCEL_SUFFIXES = frozenset({".xlsx", ".xlsm"})
CSV_SUFFIXES = frozenset({".csv"})


class ReaderError(Exception):
    """Raised when a file cannot be read as a sheet."""


def _cell(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.to_pydatetime()
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def _frame_to_grid(df: pd.DataFrame) -> list[list[Any]]:
    return [[_cell(v) for v in row] for row in df.itertuples(index=False, name=None)]


def read_sheet_grid(path: Path) -> list[list[Any]]:
    """Read the first sheet of ``path`` as a list of rows.

    Raises:
        ReaderError: unsupported suffix or unreadable file
    """
    suffix = path.suffix.lower()
    if not path.exists():
        raise ReaderError(f"file not found: {path}")
    try:
        if suffix in EXCEL_SUFFIXES:
            xls = pd.ExcelFile(path)
            if not xls.sheet_names:
                return []
            # 先頭シートのみ対象
            df = xls.parse(xls.sheet_names[0], header=None)
        elif suffix in CSV_SUFFIXES:
            df = pd.read_csv(
                path,
                header=None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=False,
                encoding="utf-8-sig",
            )
        else:
            raise ReaderError(f"unsupported file type: {path.name}")
    except pd.errors.EmptyDataError:
        return []
    except (OSError, ValueError) as e:
        raise ReaderError(f"failed to read {path.name}: {e}") from e
    return _frame_to_grid(df)
