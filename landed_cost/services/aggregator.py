from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Sequence

from landed_cost.models.enums import CalculationStatus, ChargeType, UnitType, WeightUnit
from landed_cost.services.currency import (
    ConversionUnavailable,
    CurrencyConverter,
    ExchangeRateSnapshot,
    round_cbm_display,
    round_money,
)
from landed_cost.services.extra_costs import CbmCharge, CompanyCostLine, ExtraCost, cbm_charge, company_cost
from landed_cost.services.rate_catalog import Bracket, resolve_unit_price
from landed_cost.services.volumetric import CbmResult, Dimensions, calculate_cbm, granularity_for, to_decimal


@dataclass(frozen=True)
class CostLine:
    item_id: str
    name: str | None
    amount: Decimal
    charge_type: ChargeType = ChargeType.ONCE


@dataclass
class FactorySelection:
    factory_id: str
    currency: str
    lines: list[CostLine]
    factory_name: str | None = None
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def from_live(
        cls,
        factory: Any,
        cost_items: Iterable[Any],
        selected_item_ids: Iterable[Any],
        overrides: dict[str, Decimal] | None = None,
    ) -> "FactorySelection":
        """Build a selection from current cost items; unselected items are left out."""
        overrides = overrides or {}
        selected = [str(item_id) for item_id in selected_item_ids]
        by_id = {str(item.id): item for item in cost_items if str(item.factory_id) == str(factory.id)}
        lines = []
        warnings = []
        for item_id in selected:
            item = by_id.get(item_id)
            if item is None:
                warnings.append(f"Cost item {item_id} not found for factory {factory.name}; ignored.")
                continue
            amount = overrides.get(item_id, item.amount)
            lines.append(
                CostLine(
                    item_id=item_id,
                    name=item.name,
                    amount=Decimal(str(amount)),
                    charge_type=ChargeType(item.charge_type or ChargeType.ONCE),
                )
            )
        return cls(
            factory_id=str(factory.id),
            factory_name=factory.name,
            currency=factory.currency,
            lines=lines,
            warnings=warnings,
        )


@dataclass
class CostRequest:
    dimensions: Dimensions
    quantity: Any
    target_currency: str
    factories: list[FactorySelection] = field(default_factory=list)
    rate_type: Any | None = None
    brackets: Sequence[Bracket] = ()
    unit_weight: Any = None
    weight_unit: WeightUnit = WeightUnit.KG
    company_costs: list[CompanyCostLine] = field(default_factory=list)
    order_count: int = 1
    cbm_charges: list[CbmCharge] = field(default_factory=list)


@dataclass
class FactoryCost:
    factory_id: str
    factory_name: str | None
    currency: str
    amount: Decimal
    converted: Decimal | None
    items: list[dict[str, Any]]


@dataclass
class CostBreakdown:
    status: CalculationStatus
    target_currency: str
    cbm: CbmResult
    missing_fields: list[str] = field(default_factory=list)
    invalid_fields: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    rate_type_id: str | None = None
    rate_currency: str | None = None
    freight_unit_price: Decimal | None = None
    freight_extrapolated: bool = False
    freight_cost: Decimal | None = None
    freight_cost_converted: Decimal | None = None
    factories: list[FactoryCost] = field(default_factory=list)
    factory_cost_converted: Decimal | None = None
    extra_costs: list[ExtraCost] = field(default_factory=list)
    extra_cost_converted: Decimal | None = None
    grand_total: Decimal | None = None
    rates_fetched_at: int | None = None
    rates_stale: bool = False

    @property
    def unit_cbm(self) -> Decimal | None:
        return self.cbm.unit_cbm

    @property
    def total_cbm(self) -> Decimal | None:
        return self.cbm.total_cbm

    @property
    def applied_cbm(self) -> Decimal | None:
        return self.cbm.applied_cbm

    def to_display(self) -> dict[str, Any]:
        def money(value: Decimal | None) -> str | None:
            rounded = round_money(value)
            return str(rounded) if rounded is not None else None

        def cbm(value: Decimal | None) -> str | None:
            rounded = round_cbm_display(value)
            return str(rounded) if rounded is not None else None

        return {
            "unit_cbm": str(self.cbm.unit_cbm) if self.cbm.unit_cbm is not None else None,
            "total_cbm": cbm(self.cbm.total_cbm),
            "r_ton": cbm(self.cbm.r_ton),
            "applied_cbm": cbm(self.cbm.applied_cbm),
            "is_weight_based": self.cbm.is_weight_based,
            "rate_currency": self.rate_currency,
            "freight_unit_price": money(self.freight_unit_price),
            "freight_cost": money(self.freight_cost),
            "freight_cost_converted": money(self.freight_cost_converted),
            "factory_cost_converted": money(self.factory_cost_converted),
            "extra_cost_converted": money(self.extra_cost_converted),
            "grand_total": money(self.grand_total),
            "currency": self.target_currency,
        }


def line_total(line: CostLine, quantity: Decimal | None) -> Decimal | None:
    """Amount a line contributes; ``None`` for per-quantity lines without a quantity."""
    if line.charge_type == ChargeType.PER_QUANTITY:
        return line.amount * quantity if quantity is not None else None
    return line.amount


def _known_quantity(value: Any) -> Decimal | None:
    try:
        quantity = to_decimal(value)
    except ValueError:
        return None
    if quantity is None or quantity < 0:
        return None
    return quantity


def aggregate(request: CostRequest, snapshot: ExchangeRateSnapshot | None) -> CostBreakdown:
    """Combine freight, factory and extra costs into one total in ``request.target_currency``.

    ``snapshot`` is captured once by the caller and used for every conversion
    in this breakdown. With incomplete dimensions the figures that do not
    depend on them (factory and company costs) are still reported, but no
    grand total is produced.
    """
    target = request.target_currency.upper()
    rate_type = request.rate_type
    unit_type = UnitType(rate_type.unit_type) if rate_type is not None else UnitType.CBM
    granularity = (
        granularity_for(unit_type, rate_type.rounding_granularity) if rate_type is not None else None
    )

    cbm = calculate_cbm(
        request.dimensions,
        request.quantity,
        unit_type=unit_type,
        granularity=granularity,
        unit_weight=request.unit_weight,
        weight_unit=request.weight_unit,
    )
    breakdown = CostBreakdown(
        status=cbm.status,
        target_currency=target,
        cbm=cbm,
        missing_fields=list(cbm.missing_fields),
        invalid_fields=list(cbm.invalid_fields),
    )
    if cbm.status == CalculationStatus.INVALID:
        return breakdown

    converter = CurrencyConverter(snapshot)
    if snapshot is not None:
        breakdown.rates_fetched_at = snapshot.fetched_at
        breakdown.rates_stale = snapshot.stale
    else:
        breakdown.warnings.append("Exchange rates unavailable; converted totals cannot be computed.")

    if not cbm.ok:
        _apply_factory_costs(breakdown, request, converter, target, _known_quantity(request.quantity))
        _apply_extra_costs(breakdown, request, converter, target, None)
        return breakdown

    freight_ok = _apply_freight(breakdown, request, converter, target)
    factories_ok = _apply_factory_costs(breakdown, request, converter, target, cbm.quantity)
    extras_ok = _apply_extra_costs(breakdown, request, converter, target, cbm.total_cbm)

    if freight_ok and factories_ok and extras_ok:
        breakdown.grand_total = (
            breakdown.factory_cost_converted + breakdown.freight_cost_converted + breakdown.extra_cost_converted
        )
    else:
        breakdown.status = CalculationStatus.DEGRADED
    return breakdown


def _apply_freight(
    breakdown: CostBreakdown,
    request: CostRequest,
    converter: CurrencyConverter,
    target: str,
) -> bool:
    rate_type = request.rate_type
    if rate_type is None:
        breakdown.warnings.append("No rate type selected; freight unavailable.")
        return False

    breakdown.rate_type_id = str(rate_type.id)
    breakdown.rate_currency = rate_type.currency
    price = resolve_unit_price(request.brackets, breakdown.cbm.applied_cbm)
    if price is None:
        breakdown.warnings.append(f"Rate type {rate_type.name} has no rate table; freight unavailable.")
        return False

    breakdown.freight_unit_price = price.unit_price
    breakdown.freight_extrapolated = price.extrapolated
    breakdown.freight_cost = price.unit_price * breakdown.cbm.applied_cbm
    if price.extrapolated:
        breakdown.warnings.append(
            f"Billable quantity exceeds the rate table; last bracket price applied ({price.bracket.upper_bound})."
        )
    try:
        breakdown.freight_cost_converted = converter.convert(breakdown.freight_cost, rate_type.currency, target)
    except ConversionUnavailable as exc:
        breakdown.warnings.append(f"Freight conversion unavailable: {exc}")
        return False
    return True


def _apply_factory_costs(
    breakdown: CostBreakdown,
    request: CostRequest,
    converter: CurrencyConverter,
    target: str,
    quantity: Decimal | None,
) -> bool:
    total = Decimal("0")
    available = True
    for selection in request.factories:
        breakdown.warnings.extend(selection.warnings)
        items = []
        amount = Decimal("0")
        complete = True
        for line in selection.lines:
            value = line_total(line, quantity)
            if value is None:
                complete = False
            else:
                amount += value
            items.append(
                {
                    "item_id": line.item_id,
                    "name": line.name,
                    "charge_type": line.charge_type.value,
                    "amount": str(value) if value is not None else None,
                }
            )
        converted = None
        if not complete:
            breakdown.warnings.append(f"Per-quantity items of {selection.factory_name} need a quantity.")
            available = False
        else:
            try:
                converted = converter.convert(amount, selection.currency, target)
            except ConversionUnavailable as exc:
                breakdown.warnings.append(f"Factory cost conversion unavailable for {selection.factory_name}: {exc}")
                available = False
            else:
                total += converted
        breakdown.factories.append(
            FactoryCost(
                factory_id=selection.factory_id,
                factory_name=selection.factory_name,
                currency=selection.currency,
                amount=amount,
                converted=converted,
                items=items,
            )
        )
    if available:
        breakdown.factory_cost_converted = total
    return available


def _apply_extra_costs(
    breakdown: CostBreakdown,
    request: CostRequest,
    converter: CurrencyConverter,
    target: str,
    total_cbm: Decimal | None,
) -> bool:
    """Company cost items always; CBM-priced charges only once the CBM is known."""
    extras = [company_cost(line, request.order_count) for line in request.company_costs]
    if total_cbm is not None:
        extras.extend(cbm_charge(charge, total_cbm) for charge in request.cbm_charges)

    total = Decimal("0")
    available = True
    for extra in extras:
        try:
            extra.converted = converter.convert(extra.total, extra.currency, target)
        except ConversionUnavailable as exc:
            breakdown.warnings.append(f"{extra.name} conversion unavailable: {exc}")
            available = False
        else:
            total += extra.converted
        breakdown.extra_costs.append(extra)
    if available:
        breakdown.extra_cost_converted = total
    return available
