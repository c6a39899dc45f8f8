"""Client factory for the Coinvert currency-rate layer."""

from __future__ import annotations

from coinvert.config import as_mapping, get_config
from coinvert.errors import CoinvertError, FetchError, FetchErrorReason
from coinvert.logging import setup_logging
from coinvert.providers import HistoricalSeries, RatePoint, RateTable
from coinvert.services import RateClient, RateStore, create_rate_client

__all__ = [
    "CoinvertError",
    "FetchError",
    "FetchErrorReason",
    "HistoricalSeries",
    "RateClient",
    "RatePoint",
    "RateStore",
    "RateTable",
    "create_client",
]


def create_client(
    config_name: str | None = None,
    *,
    store: RateStore | None = None,
    configure_logging: bool = True,
) -> RateClient:
    """Client factory mirroring an application factory: config, logging, store, providers."""

    config = as_mapping(get_config(config_name))
    if configure_logging:
        setup_logging(config)
    return create_rate_client(config, store=store)
