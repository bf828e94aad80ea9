from __future__ import annotations

from dataclasses import dataclass

"""RawRow model: one canonical input row produced by the row parser.

All text fields are already coerced to strings (``""`` when the cell was
empty). ``raw_index`` is the 1-based position in the source sheet, header
included, so the first data row is 2.
"""

__all__ = [
    "RawRow",
]


@dataclass(frozen=True)
class RawRow:
    """Canonical row after header mapping and cell coercion."""
    raw_index: int  # 元シート行番号 (ヘッダ=1, 最初のデータ行=2)
    heat_id: str
    steel_grade: str
    unit: str
    start_str: str  # HH:MM (zero padded) or ""
    end_str: str
    date_str: str = ""  # YYYY-MM-DD or free text, "" if absent
    seq_num: float | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "rawIndex": self.raw_index,
            "heatId": self.heat_id,
            "steelGrade": self.steel_grade,
            "unit": self.unit,
            "startStr": self.start_str,
            "endStr": self.end_str,
            "dateStr": self.date_str,
            "seqNum": self.seq_num,
        }
