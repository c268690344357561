from __future__ import annotations

import uuid
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator

from landed_cost.models.enums import UnitType
from landed_cost.schemas.common import BaseSchema, PatchSchema, TimestampedSchema


class CompanyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None


class CompanyUpdate(PatchSchema):
    nullable_fields = frozenset({"description"})

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    is_active: bool | None = None


class CompanyRead(TimestampedSchema):
    id: uuid.UUID
    name: str
    description: str | None
    is_active: bool


class WarehouseCreate(BaseModel):
    company_id: uuid.UUID
    name: str = Field(min_length=1, max_length=255)
    province_code: str
    city_code: str
    detail_address: str | None = None
    sort_order: int = 0


class WarehouseUpdate(PatchSchema):
    nullable_fields = frozenset({"detail_address"})

    name: str | None = Field(default=None, min_length=1, max_length=255)
    province_code: str | None = None
    city_code: str | None = None
    detail_address: str | None = None
    sort_order: int | None = None
    is_active: bool | None = None


class WarehouseRead(TimestampedSchema):
    id: uuid.UUID
    company_id: uuid.UUID
    name: str
    province_code: str
    city_code: str
    detail_address: str | None
    is_active: bool
    sort_order: int


class RateTypeCreate(BaseModel):
    warehouse_id: uuid.UUID
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    currency: str = Field(default="USD", min_length=3, max_length=3)
    unit_type: UnitType = UnitType.CBM
    rounding_granularity: Decimal | None = Field(default=None, gt=0)
    is_default: bool = False
    sort_order: int = 0

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, value: str):
        return value.upper() if isinstance(value, str) else value


class RateTypeUpdate(PatchSchema):
    nullable_fields = frozenset({"description", "rounding_granularity"})

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    unit_type: UnitType | None = None
    rounding_granularity: Decimal | None = Field(default=None, gt=0)
    is_default: bool | None = None
    sort_order: int | None = None

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, value: str | None):
        return value.upper() if isinstance(value, str) else value


class RateTypeRead(TimestampedSchema):
    id: uuid.UUID
    company_id: uuid.UUID
    warehouse_id: uuid.UUID
    name: str
    description: str | None
    currency: str
    unit_type: UnitType
    rounding_granularity: Decimal | None
    is_default: bool
    sort_order: int


class BracketCreate(BaseModel):
    cbm: Decimal = Field(gt=0)
    unit_price: Decimal = Field(ge=0)


class BracketBulkCreate(BaseModel):
    brackets: list[BracketCreate] = Field(min_length=1)
    replace: bool = False


class BracketUpdate(PatchSchema):
    cbm: Decimal | None = Field(default=None, gt=0)
    unit_price: Decimal | None = Field(default=None, ge=0)


class BracketRead(BaseSchema):
    id: uuid.UUID
    rate_type_id: uuid.UUID
    cbm: Decimal
    unit_price: Decimal
