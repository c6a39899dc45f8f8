from __future__ import annotations

from coinvert.models import CacheEntry
from coinvert.services.rate_store import CURRENCY_LIST_KEY, RateStore


def test_get_missing_key_returns_none(store):
    assert store.get("historical_usd_eur_30") is None


def test_put_then_get_roundtrips_blob(store):
    assert store.put("latest_rates_json", '{"base":"usd","rates":{"eur":0.9}}') is True

    assert store.get("latest_rates_json") == '{"base":"usd","rates":{"eur":0.9}}'


def test_put_overwrites_previous_value(store):
    store.put("k", "first")
    store.put("k", "second")

    assert store.get("k") == "second"


def test_store_persists_across_instances(tmp_path):
    url = f"sqlite:///{tmp_path / 'shared.db'}"
    writer = RateStore.from_url(url)
    writer.put("k", "v")
    writer.dispose()

    reader = RateStore.from_url(url)
    try:
        assert reader.get("k") == "v"
    finally:
        reader.dispose()


def test_currency_list_empty_when_nothing_cached(store):
    assert store.get_currency_list() == set()


def test_currency_list_roundtrip(store):
    store.put_currency_list(["EUR", "usd", "jpy"])

    assert store.get_currency_list() == {"eur", "usd", "jpy"}
    assert store.get(CURRENCY_LIST_KEY) == '["eur","jpy","usd"]'


def test_corrupt_currency_list_reads_as_empty(store):
    store.put(CURRENCY_LIST_KEY, "not json")

    assert store.get_currency_list() == set()


def test_storage_failures_are_swallowed(store):
    CacheEntry.__table__.drop(store._engine)

    assert store.put("k", "v") is False
    assert store.get("k") is None
    assert store.get_currency_list() == set()


def test_from_config_uses_database_url():
    store = RateStore.from_config({"CACHE_DATABASE_URL": "sqlite://"})
    try:
        store.put("k", "v")
        assert store.get("k") == "v"
    finally:
        store.dispose()
