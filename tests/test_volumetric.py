from decimal import Decimal

import pytest

from landed_cost.models.enums import CalculationStatus, UnitType, WeightUnit
from landed_cost.services.volumetric import Dimensions, calculate_cbm, ceil_to_granularity, to_decimal


def test_boundary_total_is_not_rounded_up():
    result = calculate_cbm(Dimensions(50, 40, 30), 10)

    assert result.status == CalculationStatus.OK
    assert result.unit_cbm == Decimal("0.06")
    assert result.total_cbm == Decimal("0.6")
    assert result.applied_cbm == Decimal("0.6")


def test_total_is_ceiled_to_next_tenth():
    result = calculate_cbm(Dimensions(33, 33, 33), 5)

    assert result.total_cbm == Decimal("0.179685")
    assert result.applied_cbm == Decimal("0.2")


@pytest.mark.parametrize(
    "dims,quantity",
    [((10, 10, 10), 1), ((120, 80, 95), 3), ((33, 33, 33), 7), ((1, 1, 1), 1)],
)
def test_applied_is_never_below_total_and_within_one_step(dims, quantity):
    result = calculate_cbm(Dimensions(*dims), quantity)

    assert result.applied_cbm >= result.total_cbm
    assert result.applied_cbm - result.total_cbm < result.granularity


def test_zero_quantity_yields_zero_totals():
    result = calculate_cbm(Dimensions(50, 40, 30), 0)

    assert result.status == CalculationStatus.OK
    assert result.total_cbm == 0
    assert result.applied_cbm == 0


def test_missing_or_zero_dimension_is_incomplete():
    result = calculate_cbm(Dimensions(None, 40, 0), 10)

    assert result.status == CalculationStatus.INCOMPLETE
    assert result.missing_fields == ["length", "height"]
    assert result.applied_cbm is None


def test_missing_quantity_is_incomplete():
    result = calculate_cbm(Dimensions(50, 40, 30), "")

    assert result.status == CalculationStatus.INCOMPLETE
    assert result.missing_fields == ["quantity"]


def test_negative_or_garbage_input_is_invalid():
    result = calculate_cbm(Dimensions(-50, "abc", 30), 10)

    assert result.status == CalculationStatus.INVALID
    assert result.invalid_fields == ["length", "width"]
    assert result.total_cbm is None


def test_weight_ton_wins_when_heavier():
    result = calculate_cbm(Dimensions(50, 40, 30), 10, unit_weight=100)

    assert result.weight_ton == Decimal("1")
    assert result.r_ton == Decimal("1")
    assert result.applied_cbm == Decimal("1")
    assert result.is_weight_based is True


def test_light_goods_bill_by_volume():
    result = calculate_cbm(Dimensions(50, 40, 30), 10, unit_weight=500, weight_unit=WeightUnit.G)

    assert result.total_weight_kg == Decimal("5")
    assert result.applied_cbm == Decimal("0.6")
    assert result.is_weight_based is False


def test_kg_rate_type_bills_whole_kilograms():
    result = calculate_cbm(Dimensions(50, 40, 30), 10, unit_type=UnitType.KG, unit_weight="12.35")

    assert result.total_weight_kg == Decimal("123.50")
    assert result.applied_cbm == Decimal("124")
    assert result.granularity == Decimal("1")


def test_kg_rate_type_requires_weight():
    result = calculate_cbm(Dimensions(50, 40, 30), 10, unit_type=UnitType.KG)

    assert result.status == CalculationStatus.INCOMPLETE
    assert result.missing_fields == ["unit_weight"]


def test_custom_granularity():
    assert ceil_to_granularity(Decimal("0.61"), Decimal("0.5")) == Decimal("1.0")
    assert ceil_to_granularity(Decimal("10"), Decimal("1")) == Decimal("10")


def test_to_decimal_parsing():
    assert to_decimal(" 1,250.5 ") == Decimal("1250.5")
    assert to_decimal("  ") is None
    with pytest.raises(ValueError):
        to_decimal("NaN")
    with pytest.raises(ValueError):
        to_decimal(True)
