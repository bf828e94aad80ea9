from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

"""Static unit table: device code -> stage group and canonical order.

Read-only. Unit codes are upper-case; callers normalize before lookup.
"""

__all__ = [
    "GROUP_ORDER",
    "UNIT_TABLE",
    "UnitInfo",
    "lookup_unit",
]

KR = "KR"
BOF = "BOF"
LF = "LF"
CASTER = "CASTER"

# 工程順 (KR -> BOF -> LF -> CASTER)
GROUP_ORDER: tuple[str, ...] = (KR, BOF, LF, CASTER)


@dataclass(frozen=True)
class UnitInfo:
    group: str
    order: int


UNIT_TABLE = MappingProxyType({
    "KR1": UnitInfo(KR, 1),
    "KR2": UnitInfo(KR, 1),
    "BOF1": UnitInfo(BOF, 2),
    "BOF2": UnitInfo(BOF, 2),
    "BOF3": UnitInfo(BOF, 2),
    "BOF4": UnitInfo(BOF, 2),
    "BOF5": UnitInfo(BOF, 2),
    "LF1": UnitInfo(LF, 3),
    "LF2": UnitInfo(LF, 3),
    "LF3": UnitInfo(LF, 3),
    "LF4": UnitInfo(LF, 3),
    "LF5": UnitInfo(LF, 3),
    "BCM1": UnitInfo(CASTER, 4),
    "BCM2": UnitInfo(CASTER, 4),
    "BCM3": UnitInfo(CASTER, 4),
    "TSC1": UnitInfo(CASTER, 4),
    "TSC2": UnitInfo(CASTER, 4),
})


def lookup_unit(unit: str) -> UnitInfo | None:
    """Return the table entry for a unit code, or None if it is unknown."""
    return UNIT_TABLE.get(str(unit).strip().upper())
