from __future__ import annotations

from coinvert import RateClient, RateStore, RateTable, create_client
from coinvert.providers.mock import MockRateProvider


def test_create_client_builds_working_client_from_testing_config():
    client = create_client("testing", configure_logging=False)
    try:
        assert isinstance(client, RateClient)
        assert isinstance(client._primary, MockRateProvider)
        assert client._fallback is None

        table = client.get_latest("usd")
        assert isinstance(table, RateTable)
        assert client.cached_currencies() >= {"usd", "eur"}
    finally:
        client.close()


def test_create_client_accepts_injected_store(store):
    client = create_client("testing", store=store, configure_logging=False)
    try:
        client.get_latest("usd")
    finally:
        client.close()

    assert isinstance(store, RateStore)
    assert store.get("latest_rates_json") is not None


def test_create_client_history_with_mock_provider(store):
    client = create_client("testing", store=store, configure_logging=False)
    try:
        series = client.get_historical("usd", "eur", 5)
    finally:
        client.close()

    assert len(series) == 5
    dates = [point.date for point in series.points]
    assert dates == sorted(dates)
    assert store.get("historical_usd_eur_5") is not None
