from __future__ import annotations

import uuid
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator

from landed_cost.models.enums import ChargeType
from landed_cost.schemas.common import PatchSchema, TimestampedSchema


class SlotSchema(BaseModel):
    factory_id: str = Field(min_length=1)
    selected_item_ids: list[str] = Field(default_factory=list)
    cost_values: dict[str, Decimal] = Field(default_factory=dict)
    charge_type_values: dict[str, ChargeType] = Field(default_factory=dict)

    @field_validator("factory_id", mode="before")
    @classmethod
    def stringify_factory_id(cls, value):
        return str(value) if isinstance(value, uuid.UUID) else value

    @field_validator("selected_item_ids", mode="before")
    @classmethod
    def stringify_item_ids(cls, value):
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value]
        return value

    @field_validator("cost_values", mode="before")
    @classmethod
    def drop_blank_costs(cls, value):
        if not isinstance(value, dict):
            return value
        return {str(key): amount for key, amount in value.items() if amount is not None and amount != ""}

    @field_validator("cost_values")
    @classmethod
    def non_negative_costs(cls, value: dict[str, Decimal]):
        for key, amount in value.items():
            if not amount.is_finite() or amount < 0:
                raise ValueError(f"cost value for {key} must be a non-negative number")
        return value


class PresetCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    slots: list[SlotSchema] = Field(default_factory=list)


class PresetUpdate(PatchSchema):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    slots: list[SlotSchema] | None = None
    sort_order: int | None = None


class PresetRead(TimestampedSchema):
    id: uuid.UUID
    name: str
    slots: list[SlotSchema]
    is_default: bool
    sort_order: int


class PresetList(BaseModel):
    presets: list[PresetRead]
