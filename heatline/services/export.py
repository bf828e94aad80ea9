from __future__ import annotations

import json
from collections.abc import Sequence

import pandas as pd

from ..models.heat import Heat
from ..models.raw_row import RawRow
from ..models.validation_error import ValidationError

"""JSON / CSV exports of pipeline output."""

__all__ = [
    "ERROR_CSV_HEADER",
    "errors_to_csv",
    "heats_to_json",
    "rows_to_json",
]

ERROR_CSV_HEADER = ["Heat_ID", "Kind", "Unit", "Message"]


def heats_to_json(heats: Sequence[Heat]) -> str:
    return json.dumps([h.to_dict() for h in heats], ensure_ascii=False, indent=2)


def rows_to_json(rows: Sequence[RawRow]) -> str:
    """Cleaned canonical rows, as fed to validation."""
    return json.dumps([r.to_dict() for r in rows], ensure_ascii=False, indent=2)


def errors_to_csv(errors: Sequence[ValidationError]) -> str:
    df = pd.DataFrame(
        [[e.heat_id, e.kind.value, e.unit or "", e.message] for e in errors],
        columns=ERROR_CSV_HEADER,
    )
    return df.to_csv(index=False, lineterminator="\n")
