"""Provider interfaces and data structures for remote rate sources."""

from .base import BaseRateProvider, ProviderError, SchemaError
from .currency_api_client import (
    CurrencyApiClient,
    CurrencyApiClientConfig,
    CurrencyApiError,
)
from .currency_api_provider import CurrencyApiProvider
from .schemas import HistoricalSeries, RatePoint, RateTable, normalize_currency

__all__ = [
    "BaseRateProvider",
    "ProviderError",
    "SchemaError",
    "HistoricalSeries",
    "RatePoint",
    "RateTable",
    "normalize_currency",
    "CurrencyApiClient",
    "CurrencyApiClientConfig",
    "CurrencyApiError",
    "CurrencyApiProvider",
]
