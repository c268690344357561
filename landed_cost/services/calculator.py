from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from landed_cost.core.config import get_settings
from landed_cost.core.logging import get_logger
from landed_cost.models.enums import CalculationStatus
from landed_cost.repositories.cost_repo import CompanyCostItemRepository, CostSettingRepository
from landed_cost.repositories.factory_repo import FactoryCostItemRepository, FactoryRepository
from landed_cost.repositories.preset_repo import PresetRepository
from landed_cost.repositories.shipping_repo import RateBracketRepository, RateTypeRepository
from landed_cost.schemas.calculation import CalculationRequest
from landed_cost.services.aggregator import CostBreakdown, CostRequest, FactorySelection, aggregate
from landed_cost.services.currency import round_money
from landed_cost.services.extra_costs import CbmCharge, CompanyCostLine, charges_from_settings
from landed_cost.services.presets import load_slots, restore
from landed_cost.services.providers.exchange_rate import ExchangeRateProvider
from landed_cost.services.rate_catalog import RateCatalog, to_brackets
from landed_cost.services.volumetric import Dimensions

logger = get_logger(__name__)

ENGINE_VERSION = "1.0.0"


@dataclass
class CalculationResult:
    status: str
    missing_fields: list[str]
    invalid_fields: list[str]
    message: str | None
    breakdown: dict[str, Any] | None
    factories: list[dict[str, Any]] | None
    warnings: list[str]
    extra_costs: list[dict[str, Any]] | None = None
    rates_fetched_at: int | None = None
    rates_stale: bool = False


class CalculatorService:
    """Loads records and rates, then hands everything to the pure aggregator."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.settings = get_settings()
        self.rate_type_repo = RateTypeRepository(session)
        self.bracket_repo = RateBracketRepository(session)
        self.factory_repo = FactoryRepository(session)
        self.cost_item_repo = FactoryCostItemRepository(session)
        self.preset_repo = PresetRepository(session)
        self.company_cost_repo = CompanyCostItemRepository(session)
        self.cost_setting_repo = CostSettingRepository(session)
        self.fx_provider = ExchangeRateProvider(session)

    async def calculate(self, request: CalculationRequest) -> CalculationResult:
        warnings: list[str] = []
        target = request.target_currency or self.settings.display_currency

        fetch = await self.fx_provider.fetch_snapshot()
        snapshot = fetch.usable_snapshot
        if not fetch.success and fetch.error is not None:
            warnings.append(fetch.error.message)
            if snapshot is not None:
                warnings.append("Using previously loaded exchange rates.")

        rate_type, brackets = await self._resolve_rate_type(request, warnings)

        if request.preset_id is not None:
            selections = await self._selections_from_preset(request.preset_id, warnings)
            if selections is None:
                return self._not_found("Preset not found")
        else:
            selections = await self._selections_from_input(request, warnings)

        cost_request = CostRequest(
            dimensions=Dimensions(request.length, request.width, request.height),
            quantity=request.quantity,
            target_currency=target,
            factories=selections,
            rate_type=rate_type,
            brackets=brackets,
            unit_weight=request.unit_weight,
            weight_unit=request.weight_unit,
            company_costs=await self._company_costs(request, rate_type, warnings),
            order_count=request.order_count,
            cbm_charges=await self._cbm_charges(warnings),
        )
        breakdown = aggregate(cost_request, snapshot)
        logger.info(
            "calculation",
            status=breakdown.status.value,
            rate_type_id=breakdown.rate_type_id,
            factories=len(selections),
            engine_version=ENGINE_VERSION,
        )
        return self._result(breakdown, warnings)

    async def _resolve_rate_type(self, request: CalculationRequest, warnings: list[str]):
        if request.warehouse_id is None:
            return None, []
        rate_types = await self.rate_type_repo.list(request.warehouse_id)
        catalog = RateCatalog(rate_types)
        rate_type = catalog.resolve_rate_type(request.warehouse_id, request.rate_type_id)
        if rate_type is None:
            warnings.append("No rate type available for the selected warehouse.")
            return None, []
        return rate_type, to_brackets(await self.bracket_repo.list(rate_type.id))

    async def _company_costs(
        self, request: CalculationRequest, rate_type, warnings: list[str]
    ) -> list[CompanyCostLine]:
        """Cost items of the rate type's shipping company; required items are always charged."""
        if rate_type is None:
            return []
        items = await self.company_cost_repo.list(rate_type.company_id)
        if request.company_cost_item_ids is None:
            return [CompanyCostLine.from_item(item) for item in items]
        selected = {str(item_id) for item_id in request.company_cost_item_ids}
        known = {str(item.id) for item in items}
        for item_id in sorted(selected - known):
            warnings.append(f"Company cost item {item_id} not found; ignored.")
        return [CompanyCostLine.from_item(item) for item in items if item.is_required or str(item.id) in selected]

    async def _cbm_charges(self, warnings: list[str]) -> list[CbmCharge]:
        settings = await self.cost_setting_repo.list(active_only=True)
        try:
            return charges_from_settings(settings)
        except ValueError as exc:
            logger.warning("cost_settings_invalid", error=str(exc))
            warnings.append("Cost settings are misconfigured; inland, domestic and 3PL charges skipped.")
            return []

    async def _selections_from_input(self, request: CalculationRequest, warnings: list[str]) -> list[FactorySelection]:
        selections = []
        for selected in request.factories:
            factory = await self.factory_repo.get(selected.factory_id)
            if factory is None:
                warnings.append(f"Factory {selected.factory_id} not found; skipped.")
                continue
            items = await self.cost_item_repo.list(factory.id)
            selections.append(
                FactorySelection.from_live(
                    factory,
                    items,
                    selected.selected_item_ids,
                    overrides=selected.cost_values,
                )
            )
        return selections

    async def _selections_from_preset(self, preset_id, warnings: list[str]) -> list[FactorySelection] | None:
        preset = await self.preset_repo.get(preset_id)
        if preset is None:
            return None
        factory_ids = [slot.factory_id for slot in load_slots(preset.slots)]
        factories = await self.factory_repo.get_many(factory_ids)
        # names label the lines only; amounts stay as saved
        item_names = {}
        for factory_id in factories:
            for item in await self.cost_item_repo.list(factory_id, active_only=False):
                item_names[str(item.id)] = item.name
        restored = restore(preset, factories, item_names)
        warnings.extend(restored.warnings)
        return restored.selections

    def _not_found(self, message: str) -> CalculationResult:
        return CalculationResult(
            status="not_found",
            missing_fields=[],
            invalid_fields=[],
            message=message,
            breakdown=None,
            factories=None,
            warnings=[],
        )

    def _result(self, breakdown: CostBreakdown, warnings: list[str]) -> CalculationResult:
        message = None
        if breakdown.status == CalculationStatus.INCOMPLETE:
            message = "Enter dimensions and quantity to calculate."
        elif breakdown.status == CalculationStatus.INVALID:
            message = "Dimensions, quantity and weight must be non-negative numbers."
        elif breakdown.status == CalculationStatus.DEGRADED:
            message = "Some totals are unavailable."

        computed = breakdown.status in {CalculationStatus.OK, CalculationStatus.DEGRADED}
        factories = None
        extra_costs = None
        # factory and company costs do not depend on dimensions, so incomplete input still lists them
        if breakdown.status != CalculationStatus.INVALID:
            factories = [
                {
                    "factory_id": cost.factory_id,
                    "factory_name": cost.factory_name,
                    "currency": cost.currency,
                    "amount": str(cost.amount),
                    "converted": str(cost.converted) if cost.converted is not None else None,
                    "items": cost.items,
                }
                for cost in breakdown.factories
            ]
            extra_costs = [
                {
                    "kind": extra.kind,
                    "item_id": extra.item_id,
                    "name": extra.name,
                    "currency": extra.currency,
                    "amount": str(round_money(extra.amount)),
                    "vat": str(round_money(extra.vat)),
                    "converted": str(round_money(extra.converted)) if extra.converted is not None else None,
                    "details": extra.details,
                }
                for extra in breakdown.extra_costs
            ]
        return CalculationResult(
            status=breakdown.status.value,
            missing_fields=breakdown.missing_fields,
            invalid_fields=breakdown.invalid_fields,
            message=message,
            breakdown=breakdown.to_display() if computed else None,
            factories=factories,
            extra_costs=extra_costs,
            warnings=warnings + breakdown.warnings,
            rates_fetched_at=breakdown.rates_fetched_at,
            rates_stale=breakdown.rates_stale,
        )
