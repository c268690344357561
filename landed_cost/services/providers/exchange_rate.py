from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable

import httpx
from sqlalchemy.exc import SQLAlchemyError

from landed_cost.core.config import get_settings
from landed_cost.core.logging import get_logger
from landed_cost.db.base import now_ms
from landed_cost.repositories.fx_rate_repo import FxRateRepository
from landed_cost.services.currency import DailyRate, ExchangeRateSnapshot, RateInfo
from landed_cost.services.providers.base import redis_get_json, redis_set_json
from landed_cost.services.providers.http_client import CircuitBreaker, get_json
from landed_cost.services.providers.types import ExchangeRateFetchResult, FetchError

logger = get_logger(__name__)

SNAPSHOT_KEY = "fx:snapshot:{reference}"
LAST_GOOD_KEY = "fx:snapshot:{reference}:last_good"

# the bank publishes offshore yuan as CNH
CURRENCY_CODE_MAP = {"CNH": "CNY"}

_cb = CircuitBreaker()


def parse_rate(value: Any) -> Decimal:
    """'1,473.50' -> Decimal('1473.50')"""
    try:
        return Decimal(str(value).replace(",", "").strip())
    except InvalidOperation as exc:
        raise ValueError(f"unparseable rate {value!r}") from exc


def snapshot_to_payload(snapshot: ExchangeRateSnapshot) -> dict[str, Any]:
    return {
        "reference_currency": snapshot.reference_currency,
        "fetched_at": snapshot.fetched_at,
        "rates": {
            code: {"base_rate": str(info.base_rate), "name": info.name, "updated_at": info.updated_at}
            for code, info in snapshot.rates.items()
        },
        "history": [
            {"date": day.rate_date.isoformat(), "rates": {code: str(rate) for code, rate in day.rates.items()}}
            for day in snapshot.history
        ],
    }


def snapshot_from_payload(payload: dict[str, Any]) -> ExchangeRateSnapshot:
    return ExchangeRateSnapshot(
        reference_currency=payload["reference_currency"],
        fetched_at=payload.get("fetched_at"),
        rates={
            code: RateInfo(
                currency=code,
                base_rate=Decimal(info["base_rate"]),
                name=info.get("name"),
                updated_at=info.get("updated_at"),
            )
            for code, info in payload["rates"].items()
        },
        history=tuple(
            DailyRate(
                rate_date=date.fromisoformat(day["date"]),
                rates={code: Decimal(rate) for code, rate in day["rates"].items()},
            )
            for day in payload.get("history", [])
        ),
    )


def snapshot_from_rows(rows: Iterable[Any], reference: str) -> ExchangeRateSnapshot | None:
    """Rebuild a snapshot from persisted daily rates; the newest day supplies the current rates."""
    by_day: dict[date, dict[str, Decimal]] = {}
    for row in rows:
        by_day.setdefault(row.rate_date, {})[row.currency] = Decimal(str(row.rate))
    if not by_day:
        return None
    newest = max(by_day)
    return ExchangeRateSnapshot(
        reference_currency=reference,
        rates={
            code: RateInfo(currency=code, base_rate=rate, updated_at=newest.isoformat())
            for code, rate in by_day[newest].items()
        },
        history=tuple(DailyRate(rate_date=day, rates=rates) for day, rates in by_day.items()),
    )


class ExchangeRateProvider:
    """Fetches Korea Exim bank base rates (KRW per unit) for the tracked currencies.

    The result always reports success or failure explicitly; nothing here
    raises to the caller. A successful snapshot is cached in Redis and also
    kept as the "last good" copy returned alongside later failures.
    """

    def __init__(self, session=None, today: Callable[[], date] = date.today) -> None:
        self.session = session
        self.settings = get_settings()
        self.repo = FxRateRepository(session) if session is not None else None
        self.today = today
        self.reference = self.settings.reference_currency.upper()
        self.tracked = tuple(code.upper() for code in self.settings.tracked_currencies)

    async def fetch_snapshot(self, force: bool = False) -> ExchangeRateFetchResult:
        cache_key = SNAPSHOT_KEY.format(reference=self.reference)
        if not force:
            cached = await redis_get_json(cache_key)
            if cached:
                return ExchangeRateFetchResult(success=True, source="redis", data=snapshot_from_payload(cached))

        if not self.settings.exchange_api_key:
            logger.error("fx_config_missing", setting="EXCHANGE_API_KEY")
            return await self._failure("CONFIG_ERROR", "Exchange-rate service is not configured.")

        if not _cb.allow():
            return await self._failure("API_ERROR", "Exchange-rate service is temporarily unavailable.")

        try:
            snapshot = await self._fetch_from_api()
        except httpx.HTTPError as exc:
            _cb.record_failure()
            logger.warning("fx_fetch_failed", error=str(exc))
            return await self._failure("API_ERROR", "Could not fetch exchange rates. Please try again later.")
        except ValueError as exc:
            _cb.record_failure()
            logger.warning("fx_payload_invalid", error=str(exc))
            return await self._failure("API_ERROR", "Exchange-rate service returned an unexpected response.")

        if snapshot is None:
            return await self._failure("NO_DATA", "No exchange-rate data published for recent business days.")
        missing = [code for code in self.tracked if code not in snapshot.rates]
        if missing:
            logger.warning("fx_partial_data", missing=missing)
            return await self._failure("PARTIAL_DATA", f"Exchange rates missing for {', '.join(missing)}.")

        _cb.record_success()
        payload = snapshot_to_payload(snapshot)
        await redis_set_json(cache_key, payload, self.settings.fx_cache_ttl_seconds)
        await redis_set_json(LAST_GOOD_KEY.format(reference=self.reference), payload)
        await self._persist(snapshot)
        return ExchangeRateFetchResult(success=True, source="koreaexim", data=snapshot)

    async def _fetch_from_api(self) -> ExchangeRateSnapshot | None:
        history: list[DailyRate] = []
        latest: dict[str, RateInfo] = {}
        day = self.today()
        for _ in range(self.settings.fx_history_max_lookback_days):
            rows = await get_json(
                self.settings.exchange_api_base,
                params={"authkey": self.settings.exchange_api_key, "searchdate": day.strftime("%Y%m%d"), "data": "AP01"},
            )
            infos = self._parse_rows(rows, day)
            if infos:
                if not latest:
                    latest = infos
                history.append(DailyRate(rate_date=day, rates={code: info.base_rate for code, info in infos.items()}))
                if len(history) >= self.settings.fx_history_days:
                    break
            day -= timedelta(days=1)

        if not latest:
            return None
        return ExchangeRateSnapshot(
            reference_currency=self.reference,
            rates=latest,
            history=tuple(history),
            fetched_at=now_ms(),
        )

    def _parse_rows(self, rows: Any, day: date) -> dict[str, RateInfo]:
        if not rows:
            return {}
        if not isinstance(rows, list):
            raise ValueError("expected a list of currency rows")
        infos = {}
        for row in rows:
            # result codes: 1 ok, 2 bad data code, 3 bad auth key, 4 daily limit
            if row.get("result", 1) != 1:
                raise ValueError(f"exchange-rate api result code {row.get('result')}")
            code = CURRENCY_CODE_MAP.get(row.get("cur_unit"), row.get("cur_unit"))
            if code not in self.tracked:
                continue
            infos[code] = RateInfo(
                currency=code,
                base_rate=parse_rate(row["deal_bas_r"]),
                name=row.get("cur_nm"),
                updated_at=day.isoformat(),
            )
        return infos

    async def _persist(self, snapshot: ExchangeRateSnapshot) -> None:
        if self.repo is None:
            return
        rows = [
            {"currency": code, "quote": self.reference, "rate": rate, "rate_date": day.rate_date}
            for day in snapshot.history
            for code, rate in day.rates.items()
        ]
        try:
            await self.repo.upsert_many(rows)
        except SQLAlchemyError as exc:
            logger.warning("fx_persist_failed", error=str(exc))

    async def _last_good(self) -> ExchangeRateSnapshot | None:
        payload = await redis_get_json(LAST_GOOD_KEY.format(reference=self.reference))
        if payload:
            return snapshot_from_payload(payload)
        if self.repo is None:
            return None
        try:
            rows = await self.repo.recent(self.reference, self.settings.fx_history_days)
        except SQLAlchemyError as exc:
            logger.warning("fx_history_load_failed", error=str(exc))
            return None
        return snapshot_from_rows(rows, self.reference)

    async def _failure(self, code: str, message: str) -> ExchangeRateFetchResult:
        return ExchangeRateFetchResult(
            success=False,
            source="unavailable",
            error=FetchError(code=code, message=message),
            stale_data=await self._last_good(),
        )
