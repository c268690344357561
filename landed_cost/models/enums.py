from __future__ import annotations

from enum import Enum


class UnitType(str, Enum):
    CBM = "cbm"
    KG = "kg"


class ChargeType(str, Enum):
    ONCE = "once"
    PER_QUANTITY = "per_quantity"


class WeightUnit(str, Enum):
    KG = "kg"
    G = "g"


class CalculationStatus(str, Enum):
    OK = "ok"
    INCOMPLETE = "incomplete"
    INVALID = "invalid"
    DEGRADED = "degraded"


class CostSettingType(str, Enum):
    INLAND = "inland"
    DOMESTIC = "domestic"
    THREE_PL = "3pl"
