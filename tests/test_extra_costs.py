from decimal import Decimal
from types import SimpleNamespace

import pytest

from landed_cost.models.enums import CostSettingType
from landed_cost.services.extra_costs import (
    DEFAULT_CONFIGS,
    CompanyCostLine,
    InlandConfig,
    ThreePLConfig,
    charges_from_settings,
    company_cost,
    parse_config,
)


def test_defaults_parse_for_every_type():
    for setting_type in CostSettingType:
        parse_config(setting_type, DEFAULT_CONFIGS[setting_type])


def test_parse_config_rejects_missing_and_unknown_keys():
    with pytest.raises(ValueError):
        parse_config(CostSettingType.THREE_PL, {"rate_per_unit": "15000"})
    with pytest.raises(ValueError):
        parse_config(CostSettingType.INLAND, {"rate_per_cbm": "70", "extra": "1"})


def test_parse_config_rejects_bad_numbers():
    with pytest.raises(ValueError):
        parse_config(CostSettingType.INLAND, {"rate_per_cbm": "abc"})
    with pytest.raises(ValueError):
        parse_config(CostSettingType.INLAND, {"rate_per_cbm": "-1"})
    with pytest.raises(ValueError):
        parse_config(CostSettingType.THREE_PL, {"rate_per_unit": "15000", "unit": "0"})


def test_zero_cbm_costs_nothing():
    assert InlandConfig(Decimal("70")).cost(Decimal("0")) == Decimal("0")
    assert ThreePLConfig(Decimal("15000"), Decimal("0.1")).cost(Decimal("0")) == Decimal("0")


def test_charges_follow_type_order_and_skip_inactive():
    settings = [
        SimpleNamespace(type="3pl", name="3PL", currency="KRW", config=DEFAULT_CONFIGS[CostSettingType.THREE_PL]),
        SimpleNamespace(
            type="domestic",
            name="Domestic",
            currency="KRW",
            config=DEFAULT_CONFIGS[CostSettingType.DOMESTIC],
            is_active=False,
        ),
        SimpleNamespace(type="inland", name="Inland", currency="USD", config=DEFAULT_CONFIGS[CostSettingType.INLAND]),
    ]

    charges = charges_from_settings(settings)

    assert [charge.type for charge in charges] == [CostSettingType.INLAND, CostSettingType.THREE_PL]
    assert [charge.vat_applicable for charge in charges] == [False, True]


def test_indivisible_cost_ignores_order_count():
    line = CompanyCostLine("c1", "C/O", Decimal("15000"), "KRW", is_vat_applicable=True)

    cost = company_cost(line, 5)

    assert cost.amount == Decimal("15000")
    assert cost.total == Decimal("16500")
    assert cost.details["order_count"] == 1
