from __future__ import annotations

from datetime import date
from decimal import Decimal
from pydantic import BaseModel


class RateInfoRead(BaseModel):
    currency_code: str
    currency_name: str | None = None
    base_rate: Decimal
    updated_at: str | None = None


class DailyRateRead(BaseModel):
    date: date
    rates: dict[str, Decimal]


class ExchangeRatesData(BaseModel):
    reference_currency: str
    rates: dict[str, RateInfoRead]
    # chronological, oldest first
    history: list[DailyRateRead]
    fetched_at: int | None = None
    stale: bool = False


class ErrorDetail(BaseModel):
    code: str
    message: str


class ExchangeRateResponse(BaseModel):
    success: bool
    data: ExchangeRatesData | None = None
    error: ErrorDetail | None = None
    timestamp: int


class ConversionResponse(BaseModel):
    amount: Decimal
    source: str
    target: str
    converted: Decimal | None
    rounded: Decimal | None
    available: bool
    message: str | None = None
