"""Abstract interface for remote rate sources."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .schemas import RateTable


class ProviderError(Exception):
    """Raised when an upstream provider cannot fulfill a request."""


class SchemaError(ProviderError):
    """Raised when upstream answered but the payload lacks the expected fields."""


class BaseRateProvider(ABC):
    """Defines the interface all rate providers must implement."""

    name: str

    @abstractmethod
    def get_latest(self, base: str) -> RateTable:
        """Retrieve the most recent rate table for the given base currency."""

    @abstractmethod
    def get_rate_on(self, base: str, target: str, day: str) -> float:
        """Retrieve the base→target rate published for the ISO date `day`."""
