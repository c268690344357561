from decimal import Decimal
from types import SimpleNamespace

from landed_cost.models.enums import CalculationStatus, ChargeType, CostSettingType
from landed_cost.services.aggregator import CostLine, CostRequest, FactorySelection, aggregate
from landed_cost.services.currency import CurrencyConverter, ExchangeRateSnapshot, RateInfo
from landed_cost.services.extra_costs import (
    CbmCharge,
    CompanyCostLine,
    DomesticConfig,
    InlandConfig,
    ThreePLConfig,
)
from landed_cost.services.rate_catalog import Bracket
from landed_cost.services.volumetric import Dimensions

SNAPSHOT = ExchangeRateSnapshot(
    reference_currency="KRW",
    rates={"USD": RateInfo("USD", Decimal("1400")), "CNY": RateInfo("CNY", Decimal("190"))},
    fetched_at=1_700_000_000_000,
)

RATE_TYPE = SimpleNamespace(
    id="rt1",
    name="LCL",
    currency="USD",
    unit_type="cbm",
    rounding_granularity=None,
)

BRACKETS = [Bracket(Decimal("1"), Decimal("100")), Bracket(Decimal("5"), Decimal("80"))]


def _factory(currency="CNY"):
    return FactorySelection(
        factory_id="f1",
        factory_name="Ningbo Plant",
        currency=currency,
        lines=[
            CostLine("i1", "Packing", Decimal("500")),
            CostLine("i2", "Labels", Decimal("2"), ChargeType.PER_QUANTITY),
        ],
    )


def _request(**overrides):
    values = dict(
        dimensions=Dimensions(50, 40, 30),
        quantity=10,
        target_currency="KRW",
        factories=[_factory()],
        rate_type=RATE_TYPE,
        brackets=BRACKETS,
    )
    values.update(overrides)
    return CostRequest(**values)


def test_grand_total_combines_freight_and_factory_costs():
    breakdown = aggregate(_request(), SNAPSHOT)

    assert breakdown.status == CalculationStatus.OK
    assert breakdown.applied_cbm == Decimal("0.6")
    assert breakdown.freight_cost == Decimal("60")
    assert breakdown.freight_cost_converted == Decimal("84000")
    # 500 once + 2 x 10 per unit, CNY -> KRW
    assert breakdown.factories[0].amount == Decimal("520")
    assert breakdown.factory_cost_converted == Decimal("98800")
    assert breakdown.grand_total == Decimal("182800")
    assert breakdown.rates_fetched_at == SNAPSHOT.fetched_at


def test_display_rounds_money_and_cbm():
    display = aggregate(_request(), SNAPSHOT).to_display()

    assert display["grand_total"] == "182800.00"
    assert display["applied_cbm"] == "0.6"
    assert display["unit_cbm"] == "0.06"
    assert display["currency"] == "KRW"


def test_same_inputs_same_snapshot_are_deterministic():
    first = aggregate(_request(), SNAPSHOT)
    second = aggregate(_request(), SNAPSHOT)

    assert first.grand_total == second.grand_total


def test_target_currency_change_scales_by_conversion_factor():
    in_krw = aggregate(_request(), SNAPSHOT).grand_total
    in_usd = aggregate(_request(target_currency="USD"), SNAPSHOT).grand_total
    factor = CurrencyConverter(SNAPSHOT).factor("KRW", "USD")

    assert abs(in_krw * factor - in_usd) < Decimal("1e-18")


def test_unselected_items_contribute_nothing():
    factory = SimpleNamespace(id="f1", name="Ningbo Plant", currency="CNY")
    items = [
        SimpleNamespace(id="i1", factory_id="f1", name="Packing", amount=Decimal("500"), charge_type="once"),
        SimpleNamespace(id="i2", factory_id="f1", name="Inspection", amount=Decimal("300"), charge_type="once"),
    ]
    selection = FactorySelection.from_live(factory, items, ["i1"])

    breakdown = aggregate(_request(factories=[selection]), SNAPSHOT)

    assert breakdown.factories[0].amount == Decimal("500")


def test_live_override_replaces_item_amount():
    factory = SimpleNamespace(id="f1", name="Ningbo Plant", currency="CNY")
    items = [SimpleNamespace(id="i1", factory_id="f1", name="Packing", amount=Decimal("500"), charge_type="once")]

    selection = FactorySelection.from_live(factory, items, ["i1", "ghost"], overrides={"i1": Decimal("450")})

    assert [line.amount for line in selection.lines] == [Decimal("450")]
    assert len(selection.warnings) == 1


def test_no_snapshot_degrades_but_keeps_raw_freight():
    breakdown = aggregate(_request(), None)

    assert breakdown.status == CalculationStatus.DEGRADED
    assert breakdown.freight_cost == Decimal("60")
    assert breakdown.freight_cost_converted is None
    assert breakdown.grand_total is None
    assert breakdown.warnings


def test_unknown_factory_currency_degrades():
    breakdown = aggregate(_request(factories=[_factory("EUR")]), SNAPSHOT)

    assert breakdown.status == CalculationStatus.DEGRADED
    assert breakdown.freight_cost_converted == Decimal("84000")
    assert breakdown.factory_cost_converted is None
    assert breakdown.grand_total is None


def test_missing_rate_type_or_table_degrades():
    no_rate_type = aggregate(_request(rate_type=None), SNAPSHOT)
    no_table = aggregate(_request(brackets=[]), SNAPSHOT)

    assert no_rate_type.status == CalculationStatus.DEGRADED
    assert no_table.status == CalculationStatus.DEGRADED
    assert no_table.factory_cost_converted == Decimal("98800")


def test_extrapolated_freight_is_flagged():
    breakdown = aggregate(_request(dimensions=Dimensions(100, 100, 100), quantity=7), SNAPSHOT)

    assert breakdown.applied_cbm == Decimal("7")
    assert breakdown.freight_extrapolated is True
    assert breakdown.freight_cost == Decimal("560")




def test_incomplete_input_still_reports_once_items():
    breakdown = aggregate(_request(quantity=None), SNAPSHOT)

    assert breakdown.status == CalculationStatus.INCOMPLETE
    assert breakdown.missing_fields == ["quantity"]
    assert breakdown.grand_total is None
    factory = breakdown.factories[0]
    assert factory.amount == Decimal("500")
    assert [item["amount"] for item in factory.items] == ["500", None]
    # per-quantity line cannot be priced, so no converted factory total
    assert breakdown.factory_cost_converted is None
    assert breakdown.freight_cost is None


def test_incomplete_dimensions_keep_factory_total():
    breakdown = aggregate(_request(dimensions=Dimensions(50, None, 30)), SNAPSHOT)

    assert breakdown.status == CalculationStatus.INCOMPLETE
    assert breakdown.factories[0].amount == Decimal("520")
    assert breakdown.factory_cost_converted == Decimal("98800")
    assert breakdown.grand_total is None


def test_invalid_input_reports_no_costs():
    breakdown = aggregate(_request(quantity=-1), SNAPSHOT)

    assert breakdown.status == CalculationStatus.INVALID
    assert breakdown.factories == []
    assert breakdown.extra_costs == []


COMPANY_COSTS = [
    CompanyCostLine("c1", "Documentation", Decimal("100000"), "KRW", is_divisible=True, is_vat_applicable=True),
    CompanyCostLine("c2", "Customs broker", Decimal("50"), "USD"),
]

CBM_CHARGES = [
    CbmCharge(CostSettingType.INLAND, "Inland freight", "USD", InlandConfig(Decimal("70"))),
    CbmCharge(
        CostSettingType.DOMESTIC,
        "Domestic shipping",
        "KRW",
        DomesticConfig(Decimal("50000"), Decimal("0.5"), Decimal("0.1"), Decimal("10000")),
    ),
    CbmCharge(CostSettingType.THREE_PL, "3PL + delivery", "KRW", ThreePLConfig(Decimal("15000"), Decimal("0.1"))),
]


def test_company_costs_split_across_orders_with_vat():
    breakdown = aggregate(_request(company_costs=COMPANY_COSTS, order_count=4), SNAPSHOT)

    documentation, broker = breakdown.extra_costs
    assert documentation.amount == Decimal("25000")
    assert documentation.vat == Decimal("2500")
    assert documentation.converted == Decimal("27500")
    assert documentation.details["order_count"] == 4
    assert broker.vat == Decimal("0")
    assert broker.converted == Decimal("70000")
    assert breakdown.extra_cost_converted == Decimal("97500")
    assert breakdown.grand_total == Decimal("182800") + Decimal("97500")


def test_cbm_charges_priced_from_total_cbm():
    breakdown = aggregate(_request(cbm_charges=CBM_CHARGES), SNAPSHOT)

    inland, domestic, three_pl = breakdown.extra_costs
    # 0.6 CBM x 70 USD, no VAT
    assert inland.amount == Decimal("42")
    assert inland.converted == Decimal("58800")
    # base fee plus one started 0.1 CBM above 0.5
    assert domestic.amount == Decimal("60000")
    assert domestic.converted == Decimal("66000")
    # six started 0.1 CBM units
    assert three_pl.amount == Decimal("90000")
    assert three_pl.converted == Decimal("99000")
    assert breakdown.extra_cost_converted == Decimal("223800")
    assert breakdown.to_display()["extra_cost_converted"] == "223800.00"


def test_domestic_charge_boundaries():
    config = DomesticConfig(Decimal("50000"), Decimal("0.5"), Decimal("0.1"), Decimal("10000"))

    assert config.cost(Decimal("0")) == Decimal("0")
    assert config.cost(Decimal("0.5")) == Decimal("50000")
    assert config.cost(Decimal("0.51")) == Decimal("60000")
    assert config.cost(Decimal("0.7")) == Decimal("70000")


def test_incomplete_input_still_lists_company_costs_but_not_cbm_charges():
    breakdown = aggregate(
        _request(quantity=None, company_costs=COMPANY_COSTS, cbm_charges=CBM_CHARGES),
        SNAPSHOT,
    )

    assert [extra.kind for extra in breakdown.extra_costs] == ["company", "company"]
    assert breakdown.grand_total is None


def test_unconvertible_extra_cost_degrades():
    costs = [CompanyCostLine("c1", "Port fee", Decimal("10"), "EUR")]

    breakdown = aggregate(_request(company_costs=costs), SNAPSHOT)

    assert breakdown.status == CalculationStatus.DEGRADED
    assert breakdown.extra_costs[0].converted is None
    assert breakdown.extra_cost_converted is None
    assert breakdown.grand_total is None
