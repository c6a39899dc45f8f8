from __future__ import annotations

import pytest

from coinvert.providers.schemas import RateTable
from coinvert.services.fx_conversion import (
    ConversionError,
    convert_amount,
    currency_choices,
    format_amount,
)


@pytest.fixture()
def table() -> RateTable:
    return RateTable(base="usd", rates={"eur": 0.9, "jpy": 150.0})


def test_convert_amount_multiplies_by_rate(table):
    assert convert_amount(100, table, "EUR") == pytest.approx(90.0)
    assert convert_amount("2.5", table, "jpy") == pytest.approx(375.0)


def test_convert_amount_to_base_uses_identity_rate(table):
    assert convert_amount(42, table, "usd") == 42.0


def test_convert_amount_missing_target_raises(table):
    with pytest.raises(ConversionError):
        convert_amount(1, table, "gbp")


def test_convert_amount_rejects_non_numeric_amount(table):
    with pytest.raises(ValueError):
        convert_amount("ten", table, "eur")


def test_format_amount_uses_two_decimals():
    assert format_amount(90.0) == "90.00"
    assert format_amount(1 / 3) == "0.33"


def test_currency_choices_adds_base_and_sorts():
    assert currency_choices({"jpy", "eur"}, "USD") == ["eur", "jpy", "usd"]
    assert currency_choices([], "usd") == ["usd"]
