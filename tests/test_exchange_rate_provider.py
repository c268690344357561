from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import httpx
import pytest

from landed_cost.core.config import get_settings
from landed_cost.services.currency import ExchangeRateSnapshot, RateInfo
from landed_cost.services.providers import exchange_rate
from landed_cost.services.providers.exchange_rate import (
    LAST_GOOD_KEY,
    ExchangeRateProvider,
    parse_rate,
    snapshot_from_rows,
    snapshot_to_payload,
)
from landed_cost.services.providers.http_client import CircuitBreaker

TODAY = date(2024, 3, 11)
PUBLISHED = {date(2024, 3, day) for day in (5, 6, 7, 8, 11)}


def _rows(day: date, with_cny: bool = True):
    rows = [
        {"result": 1, "cur_unit": "USD", "cur_nm": "미국 달러", "deal_bas_r": f"1,33{day.day % 10}.50"},
        {"result": 1, "cur_unit": "JPY(100)", "cur_nm": "일본 옌", "deal_bas_r": "890.12"},
    ]
    if with_cny:
        rows.append({"result": 1, "cur_unit": "CNH", "cur_nm": "위안화", "deal_bas_r": "184.2"})
    return rows


@pytest.fixture
def store(monkeypatch):
    data = {}

    async def fake_get(key):
        return data.get(key)

    async def fake_set(key, payload, ttl_seconds=None):
        data[key] = payload

    monkeypatch.setattr(exchange_rate, "redis_get_json", fake_get)
    monkeypatch.setattr(exchange_rate, "redis_set_json", fake_set)
    monkeypatch.setattr(exchange_rate, "_cb", CircuitBreaker())
    return data


def _provider(api_key="test-key"):
    provider = ExchangeRateProvider(today=lambda: TODAY)
    provider.settings = get_settings().model_copy(update={"exchange_api_key": api_key})
    return provider


def _patch_api(monkeypatch, with_cny=True):
    calls = []

    async def fake_get_json(url, params=None, **kwargs):
        day = date(int(params["searchdate"][:4]), int(params["searchdate"][4:6]), int(params["searchdate"][6:]))
        calls.append(day)
        assert params["data"] == "AP01"
        return _rows(day, with_cny) if day in PUBLISHED else []

    monkeypatch.setattr(exchange_rate, "get_json", fake_get_json)
    return calls


def test_parse_rate_strips_grouping():
    assert parse_rate("1,473.50") == Decimal("1473.50")
    with pytest.raises(ValueError):
        parse_rate("n/a")


@pytest.mark.asyncio
async def test_fetch_builds_snapshot_with_oldest_first_history(monkeypatch, store):
    calls = _patch_api(monkeypatch)

    result = await _provider().fetch_snapshot()

    assert result.success is True
    snapshot = result.data
    assert set(snapshot.rates) == {"USD", "CNY"}
    assert snapshot.rates["USD"].base_rate == Decimal("1331.50")
    assert snapshot.rates["CNY"].base_rate == Decimal("184.2")
    assert [day.rate_date for day in snapshot.history] == sorted(PUBLISHED)
    # walked back over the weekend and stopped once five days were found
    assert calls[-1] == date(2024, 3, 5)
    assert LAST_GOOD_KEY.format(reference="KRW") in store


@pytest.mark.asyncio
async def test_second_fetch_is_served_from_cache(monkeypatch, store):
    calls = _patch_api(monkeypatch)
    provider = _provider()

    await provider.fetch_snapshot()
    first_calls = len(calls)
    result = await provider.fetch_snapshot()

    assert result.source == "redis"
    assert len(calls) == first_calls
    assert result.data.rates["USD"].base_rate == Decimal("1331.50")


@pytest.mark.asyncio
async def test_missing_tracked_currency_is_partial_data(monkeypatch, store):
    _patch_api(monkeypatch, with_cny=False)

    result = await _provider().fetch_snapshot()

    assert result.success is False
    assert result.error.code == "PARTIAL_DATA"
    assert "CNY" in result.error.message


@pytest.mark.asyncio
async def test_missing_api_key_is_config_error(store):
    result = await _provider(api_key=None).fetch_snapshot()

    assert result.success is False
    assert result.error.code == "CONFIG_ERROR"
    assert result.usable_snapshot is None


@pytest.mark.asyncio
async def test_failure_returns_last_good_snapshot_as_stale(monkeypatch, store):
    last_good = ExchangeRateSnapshot(
        reference_currency="KRW",
        rates={"USD": RateInfo("USD", Decimal("1300")), "CNY": RateInfo("CNY", Decimal("180"))},
        fetched_at=1,
    )
    store[LAST_GOOD_KEY.format(reference="KRW")] = snapshot_to_payload(last_good)

    async def failing_get_json(url, params=None, **kwargs):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(exchange_rate, "get_json", failing_get_json)

    result = await _provider().fetch_snapshot()

    assert result.success is False
    assert result.error.code == "API_ERROR"
    assert result.usable_snapshot.stale is True
    assert result.usable_snapshot.rate_of("USD") == Decimal("1300")


@pytest.mark.asyncio
async def test_api_result_code_is_an_error(monkeypatch, store):
    async def bad_key(url, params=None, **kwargs):
        return [{"result": 3}]

    monkeypatch.setattr(exchange_rate, "get_json", bad_key)

    result = await _provider().fetch_snapshot()

    assert result.error.code == "API_ERROR"


@pytest.mark.asyncio
async def test_open_breaker_skips_the_api(monkeypatch, store):
    breaker = CircuitBreaker(max_failures=1)
    breaker.record_failure()
    monkeypatch.setattr(exchange_rate, "_cb", breaker)
    calls = _patch_api(monkeypatch)

    result = await _provider().fetch_snapshot()

    assert result.error.code == "API_ERROR"
    assert calls == []


def test_circuit_breaker_half_opens_after_cool_down():
    now = [0.0]
    breaker = CircuitBreaker(max_failures=2, reset_seconds=30, clock=lambda: now[0])

    breaker.record_failure()
    assert breaker.allow() is True
    breaker.record_failure()
    assert breaker.allow() is False

    now[0] = 31
    assert breaker.allow() is True
    breaker.record_failure()
    assert breaker.allow() is False

    breaker.record_success()
    assert breaker.allow() is True


def test_snapshot_from_persisted_rows():
    rows = [
        SimpleNamespace(currency="USD", rate=Decimal("1320"), rate_date=date(2024, 3, 8)),
        SimpleNamespace(currency="USD", rate=Decimal("1310"), rate_date=date(2024, 3, 7)),
        SimpleNamespace(currency="CNY", rate=Decimal("183"), rate_date=date(2024, 3, 8)),
    ]

    snapshot = snapshot_from_rows(rows, "KRW")

    assert snapshot.rate_of("USD") == Decimal("1320")
    assert [day.rate_date for day in snapshot.history] == [date(2024, 3, 7), date(2024, 3, 8)]
    assert snapshot_from_rows([], "KRW") is None
