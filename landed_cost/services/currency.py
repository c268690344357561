"""Exchange-rate snapshots and conversion between currencies.

Every tracked currency carries a ``base_rate``: the number of reference
currency units (KRW by default) one unit of it buys. The reference currency
itself always has a rate of 1.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Mapping

MONEY_QUANT = Decimal("0.01")
CBM_DISPLAY_QUANT = Decimal("0.1")


class ConversionUnavailable(LookupError):
    def __init__(self, currency: str, message: str | None = None) -> None:
        self.currency = currency
        super().__init__(message or f"No exchange rate for {currency}")


@dataclass(frozen=True)
class RateInfo:
    currency: str
    base_rate: Decimal
    name: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class DailyRate:
    rate_date: date
    rates: Mapping[str, Decimal]

    def __post_init__(self) -> None:
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))


@dataclass(frozen=True)
class ExchangeRateSnapshot:
    """Immutable set of base rates captured at one point in time.

    ``history`` holds the trailing daily rates in chronological order, oldest
    first; the newest entry is last.
    """

    reference_currency: str
    rates: Mapping[str, RateInfo]
    history: tuple[DailyRate, ...] = ()
    fetched_at: int | None = None
    stale: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "rates", MappingProxyType({code.upper(): info for code, info in self.rates.items()}))
        object.__setattr__(self, "history", tuple(sorted(self.history, key=lambda day: day.rate_date)))

    def has(self, currency: str) -> bool:
        code = currency.upper()
        return code == self.reference_currency or code in self.rates

    def rate_of(self, currency: str) -> Decimal:
        code = currency.upper()
        if code == self.reference_currency:
            return Decimal("1")
        info = self.rates.get(code)
        if info is None or info.base_rate is None or info.base_rate <= 0:
            raise ConversionUnavailable(code)
        return info.base_rate

    def as_stale(self) -> "ExchangeRateSnapshot":
        return ExchangeRateSnapshot(
            reference_currency=self.reference_currency,
            rates=self.rates,
            history=self.history,
            fetched_at=self.fetched_at,
            stale=True,
        )


@dataclass
class CurrencyConverter:
    """Converts through the snapshot's reference currency.

    Without a snapshot every conversion is unavailable; no default rate is
    ever substituted.
    """

    snapshot: ExchangeRateSnapshot | None

    def factor(self, source: str, target: str) -> Decimal:
        if self.snapshot is None:
            raise ConversionUnavailable(source, "Exchange rates have not been loaded")
        if source.upper() == target.upper():
            return Decimal("1")
        return self.snapshot.rate_of(source) / self.snapshot.rate_of(target)

    def convert(self, amount: Decimal, source: str, target: str) -> Decimal:
        if self.snapshot is None:
            raise ConversionUnavailable(source, "Exchange rates have not been loaded")
        if source.upper() == target.upper():
            return Decimal(amount)
        # multiply before dividing to keep the round trip tight
        return Decimal(amount) * self.snapshot.rate_of(source) / self.snapshot.rate_of(target)


def round_money(value: Decimal | None) -> Decimal | None:
    if value is None:
        return None
    return Decimal(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def round_cbm_display(value: Decimal | None) -> Decimal | None:
    if value is None:
        return None
    return Decimal(value).quantize(CBM_DISPLAY_QUANT, rounding=ROUND_HALF_UP)
