from __future__ import annotations

from decimal import Decimal
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from landed_cost.core.deps import get_db_session
from landed_cost.db.base import now_ms
from landed_cost.schemas.rates import (
    ConversionResponse,
    DailyRateRead,
    ErrorDetail,
    ExchangeRateResponse,
    ExchangeRatesData,
    RateInfoRead,
)
from landed_cost.services.currency import ConversionUnavailable, CurrencyConverter, ExchangeRateSnapshot, round_money
from landed_cost.services.providers.exchange_rate import ExchangeRateProvider

router = APIRouter(prefix="/exchange-rates", tags=["exchange-rates"])


def _snapshot_data(snapshot: ExchangeRateSnapshot) -> ExchangeRatesData:
    return ExchangeRatesData(
        reference_currency=snapshot.reference_currency,
        rates={
            code: RateInfoRead(
                currency_code=code,
                currency_name=info.name,
                base_rate=info.base_rate,
                updated_at=info.updated_at,
            )
            for code, info in snapshot.rates.items()
        },
        history=[DailyRateRead(date=day.rate_date, rates=dict(day.rates)) for day in snapshot.history],
        fetched_at=snapshot.fetched_at,
        stale=snapshot.stale,
    )


@router.get("", response_model=ExchangeRateResponse)
async def exchange_rates(force: bool = False, session=Depends(get_db_session)):
    result = await ExchangeRateProvider(session).fetch_snapshot(force=force)
    if not result.success:
        stale = result.usable_snapshot
        body = ExchangeRateResponse(
            success=False,
            data=_snapshot_data(stale) if stale is not None else None,
            error=ErrorDetail(code=result.error.code, message=result.error.message),
            timestamp=now_ms(),
        )
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=body.model_dump(mode="json"))
    return ExchangeRateResponse(success=True, data=_snapshot_data(result.data), timestamp=now_ms())


@router.get("/convert", response_model=ConversionResponse)
async def convert(amount: Decimal, source: str, target: str, session=Depends(get_db_session)):
    result = await ExchangeRateProvider(session).fetch_snapshot()
    converter = CurrencyConverter(result.usable_snapshot)
    source, target = source.upper(), target.upper()
    try:
        converted = converter.convert(amount, source, target)
    except ConversionUnavailable as exc:
        return ConversionResponse(
            amount=amount,
            source=source,
            target=target,
            converted=None,
            rounded=None,
            available=False,
            message=str(exc),
        )
    return ConversionResponse(
        amount=amount,
        source=source,
        target=target,
        converted=converted,
        rounded=round_money(converted),
        available=True,
    )
