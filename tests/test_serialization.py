from __future__ import annotations

import pytest

from coinvert.providers.schemas import HistoricalSeries, RatePoint, RateTable
from coinvert.services.serialization import (
    DecodeError,
    decode_currency_list,
    decode_latest_tables,
    decode_series,
    encode_currency_list,
    encode_latest_tables,
    encode_series,
)


def test_latest_tables_roundtrip_preserves_floats_exactly():
    tables = {
        "usd": RateTable(base="usd", rates={"eur": 0.1 + 0.2, "jpy": 150.0, "btc": 1.234567890123e-05}),
        "eur": RateTable(base="eur", rates={"usd": 1.1}),
    }

    decoded = decode_latest_tables(encode_latest_tables(tables))

    assert decoded == tables
    assert decoded["usd"].rates["eur"] == 0.1 + 0.2


def test_latest_tables_encoding_is_deterministic():
    first = {"usd": RateTable(base="usd", rates={"jpy": 150.0, "eur": 0.9})}
    second = {"usd": RateTable(base="usd", rates={"eur": 0.9, "jpy": 150.0})}

    assert encode_latest_tables(first) == encode_latest_tables(second)
    assert encode_latest_tables(first) == '{"usd":{"eur":0.9,"jpy":150.0}}'


def test_series_roundtrip_keeps_order_and_values():
    series = HistoricalSeries(
        base="usd",
        target="eur",
        points=[RatePoint(date="2025-10-12", rate=0.9), RatePoint(date="2025-10-13", rate=0.9100000000000001)],
    )

    decoded = decode_series(encode_series(series))

    assert decoded == series
    assert decoded.as_pairs() == [("2025-10-12", 0.9), ("2025-10-13", 0.9100000000000001)]


def test_empty_series_roundtrip():
    series = HistoricalSeries(base="usd", target="eur", points=[])

    assert decode_series(encode_series(series)) == series


def test_currency_list_encoding_is_sorted_and_lowercase():
    assert encode_currency_list({"USD", "eur"}) == '["eur","usd"]'
    assert decode_currency_list('["eur","usd"]') == {"eur", "usd"}


@pytest.mark.parametrize(
    "decoder, blob",
    [
        (decode_latest_tables, "{"),
        (decode_latest_tables, '{"base":"usd","rates":{"eur":0.9}}'),
        (decode_latest_tables, '{"us_d":{"eur":0.9}}'),
        (decode_latest_tables, "[]"),
        (decode_series, '{"base":"usd","target":"eur","points":[["not-a-date",1.0]]}'),
        (decode_series, '{"base":"usd","target":"eur","points":[["2025-10-12"]]}'),
        (decode_series, "[]"),
        (decode_currency_list, '{"usd":1}'),
        (decode_currency_list, "[1, 2]"),
    ],
)
def test_decoders_raise_decode_error_on_corrupt_blobs(decoder, blob):
    with pytest.raises(DecodeError):
        decoder(blob)
