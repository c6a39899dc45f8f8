"""Registry and factory for rate providers."""

from __future__ import annotations

import os
from typing import Any, Callable, Dict, Iterable, List, Mapping

from .base import BaseRateProvider, ProviderError

ProviderFactory = Callable[[Mapping[str, Any]], BaseRateProvider]

DEFAULT_PROVIDER = "jsdelivr"

_PROVIDER_FACTORIES: Dict[str, ProviderFactory] = {}


def _default_factories() -> Iterable[tuple[str, ProviderFactory]]:
    from .currency_api_provider import CurrencyApiProvider
    from .mock import MockRateProvider

    def mock_factory(_config: Mapping[str, Any]) -> MockRateProvider:
        return MockRateProvider()

    def jsdelivr_factory(config: Mapping[str, Any]) -> CurrencyApiProvider:
        return CurrencyApiProvider.from_config(config, name="jsdelivr")

    def pages_dev_factory(config: Mapping[str, Any]) -> CurrencyApiProvider:
        return CurrencyApiProvider.from_config(config, name="pages_dev")

    return [
        (MockRateProvider.name, mock_factory),
        ("jsdelivr", jsdelivr_factory),
        ("pages_dev", pages_dev_factory),
    ]


def register_provider(name: str, factory: ProviderFactory) -> None:
    """Register a provider factory under the given name."""

    if not name:
        raise ValueError("Provider name cannot be empty.")
    normalized = name.lower()
    _PROVIDER_FACTORIES[normalized] = factory


def unregister_provider(name: str) -> None:
    """Remove a provider factory; primarily for testing."""

    _PROVIDER_FACTORIES.pop(name.lower(), None)


def list_providers() -> List[str]:
    """Return the list of registered provider identifiers."""

    return sorted(_PROVIDER_FACTORIES.keys())


def _resolve_name(name: str | None = None) -> str:
    return (name or os.getenv("FX_RATE_PROVIDER") or DEFAULT_PROVIDER).lower()


def get_provider(
    name: str | None = None, config: Mapping[str, Any] | None = None
) -> BaseRateProvider:
    """Instantiate a provider using the supplied or configured name."""

    provider_name = _resolve_name(name)
    try:
        factory = _PROVIDER_FACTORIES[provider_name]
    except KeyError as exc:
        available = ", ".join(list_providers()) or "none registered"
        raise ProviderError(
            f"Unknown provider '{provider_name}'. Available providers: {available}"
        ) from exc
    return factory(config or {})


def reset_registry(default_factories: Iterable[tuple[str, ProviderFactory]] | None = None) -> None:
    """Reset provider registry; useful for tests."""

    _PROVIDER_FACTORIES.clear()

    factories = default_factories or _default_factories()
    for name, factory in factories:
        register_provider(name, factory)


reset_registry()
