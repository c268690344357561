from decimal import Decimal

import pytest

from landed_cost.services.currency import (
    ConversionUnavailable,
    CurrencyConverter,
    ExchangeRateSnapshot,
    RateInfo,
    round_cbm_display,
    round_money,
)


def _snapshot():
    return ExchangeRateSnapshot(
        reference_currency="KRW",
        rates={
            "USD": RateInfo("USD", Decimal("1400")),
            "CNY": RateInfo("CNY", Decimal("190")),
        },
    )


def test_reference_currency_has_rate_one():
    assert _snapshot().rate_of("krw") == Decimal("1")


def test_convert_through_reference():
    converter = CurrencyConverter(_snapshot())

    assert converter.convert(Decimal("10"), "USD", "KRW") == Decimal("14000")
    assert converter.convert(Decimal("1400"), "KRW", "USD") == Decimal("1")


@pytest.mark.parametrize("source,target", [("USD", "CNY"), ("CNY", "KRW"), ("KRW", "USD")])
def test_round_trip_is_stable(source, target):
    converter = CurrencyConverter(_snapshot())
    amount = Decimal("1234.56")

    back = converter.convert(converter.convert(amount, source, target), target, source)

    assert abs(back - amount) < Decimal("1e-18")


def test_unknown_currency_is_reported():
    converter = CurrencyConverter(_snapshot())

    with pytest.raises(ConversionUnavailable) as exc:
        converter.convert(Decimal("1"), "EUR", "KRW")
    assert exc.value.currency == "EUR"


def test_no_snapshot_means_no_conversion():
    converter = CurrencyConverter(None)

    with pytest.raises(ConversionUnavailable):
        converter.convert(Decimal("1"), "USD", "KRW")


def test_snapshot_is_read_only():
    snapshot = _snapshot()

    with pytest.raises(TypeError):
        snapshot.rates["USD"] = RateInfo("USD", Decimal("1"))


def test_display_rounding():
    assert round_money(Decimal("2.005")) == Decimal("2.01")
    assert round_money(Decimal("2.004")) == Decimal("2.00")
    assert round_cbm_display(Decimal("0.25")) == Decimal("0.3")
    assert round_money(None) is None
