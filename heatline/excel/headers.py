from __future__ import annotations

import re
import unicodedata
from collections.abc import Sequence
from types import MappingProxyType
from typing import Any

"""Header normalizer: raw (English / Vietnamese) headers -> canonical fields.

A header is reduced to a lookup key (lower case, diacritics stripped,
``đ`` -> ``d``, whitespace and underscores removed) and looked up in a
static alias table. Unknown headers are dropped silently.
"""

__all__ = [
    "DATE",
    "END",
    "HEADER_ALIASES",
    "HEAT_ID",
    "MissingColumnsError",
    "REQUIRED_FIELDS",
    "SEQ_NUM",
    "START",
    "STEEL_GRADE",
    "TIME_FIELDS",
    "UNIT",
    "map_headers",
    "normalize_header",
]

DATE = "date_str"
HEAT_ID = "heat_id"
STEEL_GRADE = "steel_grade"
UNIT = "unit"
START = "start_str"
END = "end_str"
SEQ_NUM = "seq_num"

REQUIRED_FIELDS: tuple[str, ...] = (HEAT_ID, STEEL_GRADE, UNIT, START, END)
TIME_FIELDS = frozenset({START, END})

# key = normalize_header() の結果
HEADER_ALIASES = MappingProxyType({
    # date
    "date": DATE,
    "ngay": DATE,
    "ngaysanxuat": DATE,
    # heat id
    "heatid": HEAT_ID,
    "heat": HEAT_ID,
    "heatno": HEAT_ID,
    "methep": HEAT_ID,
    "mame": HEAT_ID,
    # steel grade
    "steelgrade": STEEL_GRADE,
    "grade": STEEL_GRADE,
    "macthep": STEEL_GRADE,
    # unit
    "unit": UNIT,
    "congdoan": UNIT,
    "thietbi": UNIT,
    # start / end
    "starttime": START,
    "start": START,
    "thoigianbatdau": START,
    "batdau": START,
    "endtime": END,
    "end": END,
    "thoigianketthuc": END,
    "ketthuc": END,
    # explicit sequence
    "sequencenumber": SEQ_NUM,
    "seq": SEQ_NUM,
    "seqnum": SEQ_NUM,
    "thutu": SEQ_NUM,
})

_STRIP_RE = re.compile(r"[\s_]+")


class MissingColumnsError(Exception):
    """Raised when required canonical fields have no matching header."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"missing required columns: {', '.join(self.missing)}")


def normalize_header(header: Any) -> str:
    """Reduce a raw header to its alias lookup key.

    >>> normalize_header("Mẻ thép")
    'methep'
    >>> normalize_header(" Start_Time ")
    'starttime'
    """
    if header is None:
        return ""
    s = str(header).lower().replace("đ", "d")
    s = unicodedata.normalize("NFD", s)
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    return _STRIP_RE.sub("", s)


def map_headers(headers: Sequence[Any]) -> dict[int, str]:
    """Map column index -> canonical field name.

    When two headers resolve to the same field the leftmost column wins.

    Raises:
        MissingColumnsError: if any of REQUIRED_FIELDS is not mapped
    """
    mapping: dict[int, str] = {}
    taken: set[str] = set()
    for idx, header in enumerate(headers):
        field_name = HEADER_ALIASES.get(normalize_header(header))
        if field_name is None or field_name in taken:
            continue
        mapping[idx] = field_name
        taken.add(field_name)
    missing = [f for f in REQUIRED_FIELDS if f not in taken]
    if missing:
        raise MissingColumnsError(missing)
    return mapping
