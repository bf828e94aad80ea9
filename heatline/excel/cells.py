from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta
from typing import Any

import numpy as np
import pandas as pd

from .headers import DATE, TIME_FIELDS

"""Cell value coercer: raw spreadsheet cell -> canonical string.

Never raises. Validity of the produced text is checked later by the row
parser and the temporal resolver.

Spreadsheet serials use the 1899-12-30 epoch; a fractional part is a
fraction of a day.
"""

__all__ = [
    "EXCEL_EPOCH",
    "coerce_cell",
    "is_empty_cell",
    "serial_to_date",
    "serial_to_hhmm",
]

EXCEL_EPOCH = date(1899, 12, 30)
_SECONDS_PER_DAY = 86400
# 浮動小数点の丸め誤差 (0.375 -> 08:59:59.99) 対策
_DAY_EPSILON = 1e-7


def is_empty_cell(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def serial_to_date(serial: float) -> str:
    """Date serial -> ``YYYY-MM-DD`` (time part discarded)."""
    try:
        return (EXCEL_EPOCH + timedelta(days=math.floor(serial))).isoformat()
    except OverflowError:
        return str(serial)


def serial_to_hhmm(serial: float) -> str:
    """Time-of-day part of a serial -> ``HH:MM`` (seconds truncated)."""
    frac = serial - math.floor(serial)
    total_seconds = int(_SECONDS_PER_DAY * (frac + _DAY_EPSILON)) % _SECONDS_PER_DAY
    hours, rest = divmod(total_seconds, 3600)
    return f"{hours:02d}:{rest // 60:02d}"


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def coerce_cell(value: Any, field: str | None = None) -> str:
    """Coerce one raw cell to its canonical string.

    ``field`` is the canonical field the column maps to. Without it the
    generic rules apply: numbers in [0, 1) are times of day, numbers >= 1
    are date serials, dates render as ``YYYY-MM-DD``.
    """
    if is_empty_cell(value):
        return ""
    if isinstance(value, (bool, np.bool_)):
        return str(bool(value))
    if isinstance(value, (int, float, np.integer, np.floating)):
        number = float(value)
        if not math.isfinite(number):
            return ""
        if field == DATE:
            return serial_to_date(number) if number >= 1 else _format_number(number)
        if field in TIME_FIELDS:
            # 整数 (8 など) は時刻ではない。文字列のまま渡し FORMAT で弾く
            if 0 <= number < 1 or (number >= 1 and not number.is_integer()):
                return serial_to_hhmm(number)
            return _format_number(number)
        if field is None:
            if 0 <= number < 1:
                return serial_to_hhmm(number)
            if number >= 1:
                return serial_to_date(number)
        return _format_number(number)
    if isinstance(value, time):
        return f"{value.hour:02d}:{value.minute:02d}"
    if isinstance(value, (datetime, date)):
        # pd.Timestamp は datetime のサブクラス
        if field in TIME_FIELDS and isinstance(value, datetime):
            return f"{value.hour:02d}:{value.minute:02d}"
        return value.strftime("%Y-%m-%d")
    return str(value).strip()
