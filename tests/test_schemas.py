from decimal import Decimal

import pytest
from pydantic import ValidationError

from landed_cost.schemas.calculation import CalculationRequest
from landed_cost.schemas.shipping import CompanyUpdate, RateTypeUpdate, WarehouseUpdate


def test_patch_drops_null_for_required_columns():
    payload = CompanyUpdate.model_validate({"name": None, "is_active": None, "description": None})

    assert payload.changes() == {"description": None}


def test_patch_keeps_unset_fields_out():
    payload = WarehouseUpdate.model_validate({"sort_order": 3})

    assert payload.changes() == {"sort_order": 3}


def test_patch_can_clear_rounding_granularity():
    payload = RateTypeUpdate.model_validate({"rounding_granularity": None, "currency": "usd"})

    assert payload.changes() == {"rounding_granularity": None, "currency": "USD"}


def test_calculation_request_accepts_raw_strings():
    request = CalculationRequest.model_validate({"length": "abc", "width": "1,200", "height": 30, "quantity": "2"})

    assert request.length == "abc"
    assert request.height == Decimal("30")


def test_calculation_request_rejects_non_positive_order_count():
    with pytest.raises(ValidationError):
        CalculationRequest.model_validate({"order_count": 0})
