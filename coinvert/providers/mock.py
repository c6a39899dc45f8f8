"""Mock provider implementation for testing and local development."""

from __future__ import annotations

from datetime import date

from .base import BaseRateProvider, SchemaError
from .schemas import RateTable, normalize_currency

MOCK_RATES: dict[str, float] = {
    "eur": 0.90,
    "gbp": 0.78,
    "jpy": 150.12,
    "usd": 1.00,
}


class MockRateProvider(BaseRateProvider):
    """Deterministic provider returning synthetic, network-free FX data."""

    name = "mock"

    def get_latest(self, base: str) -> RateTable:
        base_currency = normalize_currency(base)
        rates = {code: rate for code, rate in MOCK_RATES.items() if code != base_currency}
        return RateTable(base=base_currency, rates=rates)

    def get_rate_on(self, base: str, target: str, day: str) -> float:
        base_currency = normalize_currency(base)
        target_currency = normalize_currency(target)
        if target_currency == base_currency:
            return 1.0
        if target_currency not in MOCK_RATES:
            raise SchemaError(f"Mock provider has no rate for {target_currency}")

        # Drift gently with the day of week so charts are not flat.
        offset = (date.fromisoformat(day).toordinal() % 7) - 3
        return round(MOCK_RATES[target_currency] * (1 + offset / 1000), 6)
