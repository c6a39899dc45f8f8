"""currency-api provider implementation (jsDelivr CDN and pages.dev mirror)."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from coinvert.providers.base import BaseRateProvider, ProviderError, SchemaError
from coinvert.providers.schemas import RateTable, normalize_currency

from .currency_api_client import (
    LATEST_VERSION,
    CurrencyApiClient,
    CurrencyApiClientConfig,
    CurrencyApiError,
)

DEFAULT_URL_TEMPLATES = {
    "jsdelivr": "https://cdn.jsdelivr.net/npm/@fawazahmed0/currency-api@{version}/v1/currencies/{base}.json",
    "pages_dev": "https://{version}.currency-api.pages.dev/v1/currencies/{base}.json",
}

TEMPLATE_CONFIG_KEYS = {
    "jsdelivr": "CURRENCY_API_URL_TEMPLATE",
    "pages_dev": "CURRENCY_API_MIRROR_URL_TEMPLATE",
}


class CurrencyApiProvider(BaseRateProvider):
    """Provider reading the `{base}`-keyed rate object published by currency-api.

    Latest tables are parsed tolerantly: a non-numeric rate becomes 0.0 rather
    than rejecting the whole table. Historical lookups are strict: a missing or
    non-numeric target rate is a `SchemaError` for that day.
    """

    def __init__(self, client: CurrencyApiClient, name: str = "jsdelivr") -> None:
        self._client = client
        self.name = name

    @classmethod
    def from_config(cls, config: Mapping[str, Any], name: str = "jsdelivr") -> CurrencyApiProvider:
        template_key = TEMPLATE_CONFIG_KEYS.get(name, "CURRENCY_API_URL_TEMPLATE")
        template_value = config.get(template_key)
        if not isinstance(template_value, str) or not template_value.strip():
            url_template = DEFAULT_URL_TEMPLATES.get(name, DEFAULT_URL_TEMPLATES["jsdelivr"])
        else:
            url_template = template_value
        client_config = CurrencyApiClientConfig(
            url_template=url_template,
            timeout=float(config.get("REQUEST_TIMEOUT_SECONDS", 5)),
            max_retries=int(config.get("CURRENCY_API_MAX_RETRIES", 2)),
            backoff_seconds=float(config.get("CURRENCY_API_BACKOFF_SECONDS", 0.5)),
        )
        return cls(CurrencyApiClient(client_config), name=name)

    def get_latest(self, base: str) -> RateTable:
        base_currency = normalize_currency(base)
        nested = self._fetch_nested(base_currency, LATEST_VERSION)
        rates = {code: self._lenient_rate(value) for code, value in nested.items()}
        return RateTable(base=base_currency, rates=rates)

    def get_rate_on(self, base: str, target: str, day: str) -> float:
        base_currency = normalize_currency(base)
        target_currency = normalize_currency(target)
        nested = self._fetch_nested(base_currency, day)

        if target_currency not in nested:
            raise SchemaError(f"No {target_currency} rate for {base_currency} on {day}")
        rate = self._strict_rate(nested[target_currency])
        if rate is None:
            raise SchemaError(
                f"Non-numeric {target_currency} rate for {base_currency} on {day}: "
                f"{nested[target_currency]!r}"
            )
        return rate

    def _fetch_nested(self, base_currency: str, version: str) -> dict[str, Any]:
        try:
            payload = self._client.fetch(base_currency, version)
        except CurrencyApiError as exc:
            raise ProviderError(str(exc)) from exc

        if base_currency not in payload:
            raise SchemaError(
                f"currency-api payload for {version} has no '{base_currency}' object"
            )
        nested = payload[base_currency]
        # A present but unreadable base field is treated like a bad response.
        if not isinstance(nested, dict):
            raise ProviderError(
                f"currency-api payload for {version} has a non-object '{base_currency}' field"
            )
        return nested

    @classmethod
    def _lenient_rate(cls, value: Any) -> float:
        rate = cls._strict_rate(value)
        return 0.0 if rate is None else rate

    @staticmethod
    def _strict_rate(value: Any) -> float | None:
        if isinstance(value, bool) or value is None:
            return None
        if isinstance(value, (int, float)):
            parsed = float(value)
        elif isinstance(value, str):
            try:
                parsed = float(value.strip())
            except ValueError:
                return None
        else:
            return None
        return parsed if math.isfinite(parsed) else None
