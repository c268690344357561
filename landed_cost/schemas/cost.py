from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any
from pydantic import BaseModel, Field, field_validator, model_validator

from landed_cost.models.enums import CostSettingType
from landed_cost.schemas.common import PatchSchema, TimestampedSchema
from landed_cost.services.extra_costs import DEFAULT_CURRENCIES, dump_config, parse_config


class CompanyCostItemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    default_amount: Decimal = Field(ge=0)
    currency: str = Field(default="KRW", min_length=3, max_length=3)
    is_divisible: bool = False
    is_required: bool = False
    is_vat_applicable: bool = False
    sort_order: int = 0

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, value: str):
        return value.upper() if isinstance(value, str) else value


class CompanyCostItemBulkCreate(BaseModel):
    items: list[CompanyCostItemCreate] = Field(min_length=1)
    replace: bool = False


class CompanyCostItemUpdate(PatchSchema):
    nullable_fields = frozenset({"description"})

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    default_amount: Decimal | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    is_divisible: bool | None = None
    is_required: bool | None = None
    is_vat_applicable: bool | None = None
    sort_order: int | None = None

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, value: str | None):
        return value.upper() if isinstance(value, str) else value


class CompanyCostItemRead(TimestampedSchema):
    id: uuid.UUID
    company_id: uuid.UUID
    name: str
    description: str | None
    default_amount: Decimal
    currency: str
    is_divisible: bool
    is_required: bool
    is_vat_applicable: bool
    sort_order: int


class CostSettingCreate(BaseModel):
    type: CostSettingType
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    config: dict[str, Any]
    is_active: bool = True

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, value: str | None):
        return value.upper() if isinstance(value, str) else value

    @model_validator(mode="after")
    def check_config(self):
        self.config = dump_config(parse_config(self.type, self.config))
        if self.currency is None:
            self.currency = DEFAULT_CURRENCIES[self.type]
        return self


class CostSettingUpdate(PatchSchema):
    nullable_fields = frozenset({"description"})

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    # checked against the stored setting's type when applied
    config: dict[str, Any] | None = None
    is_active: bool | None = None

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, value: str | None):
        return value.upper() if isinstance(value, str) else value


class CostSettingRead(TimestampedSchema):
    id: uuid.UUID
    type: CostSettingType
    name: str
    description: str | None
    currency: str
    config: dict[str, Any]
    is_active: bool
