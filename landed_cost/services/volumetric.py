"""Volume and revenue-ton (R.TON) calculation.

Dimensions are centimetres, weights kilograms unless stated otherwise. All
arithmetic is done on ``Decimal`` so that ceiling to a billing granularity is
exact (0.6 CBM stays 0.6 instead of becoming 0.7 through float noise).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_CEILING, Decimal, InvalidOperation
from typing import Any

from landed_cost.models.enums import CalculationStatus, UnitType, WeightUnit

CBM_DIVISOR = Decimal("1000000")
KG_PER_WEIGHT_TON = Decimal("1000")
GRAMS_PER_KG = Decimal("1000")

DEFAULT_GRANULARITY = {
    UnitType.CBM: Decimal("0.1"),
    UnitType.KG: Decimal("1"),
}


@dataclass(frozen=True)
class Dimensions:
    length: Any
    width: Any
    height: Any


@dataclass
class CbmResult:
    status: CalculationStatus
    missing_fields: list[str] = field(default_factory=list)
    invalid_fields: list[str] = field(default_factory=list)
    quantity: Decimal | None = None
    unit_cbm: Decimal | None = None
    total_cbm: Decimal | None = None
    total_weight_kg: Decimal | None = None
    weight_ton: Decimal | None = None
    r_ton: Decimal | None = None
    is_weight_based: bool = False
    applied_cbm: Decimal | None = None
    granularity: Decimal | None = None

    @property
    def ok(self) -> bool:
        return self.status == CalculationStatus.OK


def to_decimal(value: Any) -> Decimal | None:
    """Parse a user-supplied number; ``None`` for blanks, raises ValueError for garbage."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return None
    try:
        number = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"not a number: {value!r}") from exc
    if not number.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return number


def granularity_for(unit_type: UnitType, override: Decimal | None = None) -> Decimal:
    if override is not None and Decimal(override) > 0:
        return Decimal(override)
    return DEFAULT_GRANULARITY[unit_type]


def ceil_to_granularity(value: Decimal, granularity: Decimal) -> Decimal:
    """Round ``value`` up to the next multiple of ``granularity``.

    Values already on a boundary are returned unchanged.
    """
    if value <= 0:
        return Decimal("0")
    steps = (value / granularity).to_integral_value(rounding=ROUND_CEILING)
    return steps * granularity


def unit_cbm(dimensions: Dimensions) -> Decimal:
    return (
        Decimal(dimensions.length) * Decimal(dimensions.width) * Decimal(dimensions.height)
    ) / CBM_DIVISOR


def weight_in_kg(weight: Decimal, unit: WeightUnit) -> Decimal:
    return weight / GRAMS_PER_KG if unit == WeightUnit.G else weight


def calculate_cbm(
    dimensions: Dimensions,
    quantity: Any,
    unit_type: UnitType = UnitType.CBM,
    granularity: Decimal | None = None,
    unit_weight: Any = None,
    weight_unit: WeightUnit = WeightUnit.KG,
) -> CbmResult:
    """Compute unit/total CBM and the billable quantity for a rate type.

    Missing or zero dimensions give an ``incomplete`` result rather than an
    error; negative or non-numeric input gives ``invalid``. A quantity of zero
    is a complete input and yields zero totals.
    """
    values: dict[str, Decimal | None] = {}
    invalid: list[str] = []
    raw = {
        "length": dimensions.length,
        "width": dimensions.width,
        "height": dimensions.height,
        "quantity": quantity,
        "unit_weight": unit_weight,
    }
    for name, value in raw.items():
        try:
            number = to_decimal(value)
        except ValueError:
            invalid.append(name)
            continue
        if number is not None and number < 0:
            invalid.append(name)
            continue
        values[name] = number

    if invalid:
        return CbmResult(status=CalculationStatus.INVALID, invalid_fields=invalid)

    missing = [name for name in ("length", "width", "height") if not values.get(name)]
    if values.get("quantity") is None:
        missing.append("quantity")
    if unit_type == UnitType.KG and not values.get("unit_weight"):
        missing.append("unit_weight")
    if missing:
        return CbmResult(status=CalculationStatus.INCOMPLETE, missing_fields=missing)

    qty = values["quantity"]
    step = granularity_for(unit_type, granularity)
    single = unit_cbm(Dimensions(values["length"], values["width"], values["height"]))
    total = single * qty

    total_weight = None
    weight_ton = Decimal("0")
    if values.get("unit_weight"):
        total_weight = weight_in_kg(values["unit_weight"], weight_unit) * qty
        weight_ton = total_weight / KG_PER_WEIGHT_TON

    # R.TON = max(W/T, M/T); weight-billed rate types bill the raw kilograms
    r_ton = max(weight_ton, total)
    if unit_type == UnitType.KG:
        billable = total_weight
        is_weight_based = True
    else:
        billable = r_ton
        is_weight_based = weight_ton > total

    return CbmResult(
        status=CalculationStatus.OK,
        quantity=qty,
        unit_cbm=single,
        total_cbm=total,
        total_weight_kg=total_weight,
        weight_ton=weight_ton,
        r_ton=r_ton,
        is_weight_based=is_weight_based,
        applied_cbm=ceil_to_granularity(billable, step),
        granularity=step,
    )
