from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any
from pydantic import BaseModel, Field, field_validator

from landed_cost.models.enums import WeightUnit


class FactorySelectionInput(BaseModel):
    factory_id: uuid.UUID
    selected_item_ids: list[uuid.UUID] = Field(default_factory=list)
    cost_values: dict[str, Decimal] = Field(default_factory=dict)


class CalculationRequest(BaseModel):
    # raw strings pass through; blank, non-numeric and negative values are
    # classified by the volumetric layer as missing or invalid fields
    length: Decimal | str | None = None
    width: Decimal | str | None = None
    height: Decimal | str | None = None
    quantity: Decimal | str | None = None
    unit_weight: Decimal | str | None = None
    weight_unit: WeightUnit = WeightUnit.KG

    warehouse_id: uuid.UUID | None = None
    rate_type_id: uuid.UUID | None = None

    factories: list[FactorySelectionInput] = Field(default_factory=list)
    preset_id: uuid.UUID | None = None

    # None selects every cost item of the rate type's shipping company
    company_cost_item_ids: list[uuid.UUID] | None = None
    order_count: int = Field(default=1, ge=1)

    target_currency: str | None = Field(default=None, min_length=3, max_length=3)

    @field_validator("target_currency", mode="before")
    @classmethod
    def normalize_currency(cls, value: str | None):
        return value.upper() if isinstance(value, str) else value


class CalculationResponse(BaseModel):
    status: str
    missing_fields: list[str] = Field(default_factory=list)
    invalid_fields: list[str] = Field(default_factory=list)
    message: str | None = None
    breakdown: dict[str, Any] | None = None
    factories: list[dict[str, Any]] | None = None
    extra_costs: list[dict[str, Any]] | None = None
    warnings: list[str] = Field(default_factory=list)
    rates_fetched_at: int | None = None
    rates_stale: bool = False
