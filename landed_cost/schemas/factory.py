from __future__ import annotations

import uuid
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator

from landed_cost.models.enums import ChargeType
from landed_cost.schemas.common import PatchSchema, TimestampedSchema


class FactoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    currency: str = Field(min_length=3, max_length=3)
    sort_order: int = 0

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, value: str):
        return value.upper() if isinstance(value, str) else value


class FactoryUpdate(PatchSchema):
    nullable_fields = frozenset({"description"})

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    is_active: bool | None = None
    sort_order: int | None = None

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, value: str | None):
        return value.upper() if isinstance(value, str) else value


class FactoryRead(TimestampedSchema):
    id: uuid.UUID
    name: str
    description: str | None
    currency: str
    is_active: bool
    sort_order: int


class CostItemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    amount: Decimal = Field(ge=0)
    charge_type: ChargeType = ChargeType.ONCE
    sort_order: int = 0


class CostItemUpdate(PatchSchema):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    amount: Decimal | None = Field(default=None, ge=0)
    charge_type: ChargeType | None = None
    sort_order: int | None = None
    is_active: bool | None = None


class CostItemRead(TimestampedSchema):
    id: uuid.UUID
    factory_id: uuid.UUID
    name: str
    amount: Decimal
    charge_type: ChargeType
    is_active: bool
    sort_order: int
