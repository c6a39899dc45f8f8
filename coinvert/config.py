"""Configuration classes for the Coinvert rate layer."""

from __future__ import annotations

import os
from typing import Any

SUPPORTED_RATE_PROVIDERS = {"jsdelivr", "pages_dev", "mock"}
PROVIDER_ALIASES = {"cdn": "jsdelivr", "mirror": "pages_dev"}


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "coinvert"
    CACHE_DATABASE_URL = _get_env("CACHE_DATABASE_URL", "sqlite:///coinvert-cache.db")

    FX_RATE_PROVIDER = _get_env("FX_RATE_PROVIDER", "jsdelivr")
    FX_FALLBACK_PROVIDER: str | None = _get_env("FX_FALLBACK_PROVIDER", "pages_dev")
    CURRENCY_API_URL_TEMPLATE = _get_env(
        "CURRENCY_API_URL_TEMPLATE",
        "https://cdn.jsdelivr.net/npm/@fawazahmed0/currency-api@{version}/v1/currencies/{base}.json",
    )
    CURRENCY_API_MIRROR_URL_TEMPLATE = _get_env(
        "CURRENCY_API_MIRROR_URL_TEMPLATE",
        "https://{version}.currency-api.pages.dev/v1/currencies/{base}.json",
    )
    REQUEST_TIMEOUT_SECONDS = float(_get_env("REQUEST_TIMEOUT_SECONDS", "5"))
    CURRENCY_API_MAX_RETRIES = int(_get_env("CURRENCY_API_MAX_RETRIES", "2"))
    CURRENCY_API_BACKOFF_SECONDS = float(_get_env("CURRENCY_API_BACKOFF_SECONDS", "0.5"))

    HISTORY_MAX_WORKERS = int(_get_env("HISTORY_MAX_WORKERS", "4"))
    HISTORY_END_OFFSET_DAYS = int(_get_env("HISTORY_END_OFFSET_DAYS", "2"))
    DEFAULT_BASE_CURRENCY = _get_env("DEFAULT_BASE_CURRENCY", "usd")

    SCHEDULER_ENABLED = _get_env("SCHEDULER_ENABLED", "false").lower() == "true"
    RATES_REFRESH_CRON = _get_env("RATES_REFRESH_CRON", "0 */1 * * *")
    SCHEDULER_TIMEZONE = _get_env("SCHEDULER_TIMEZONE", "UTC")

    LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")
    LOG_JSON_ENABLED = _get_env("LOG_JSON_ENABLED", "false").lower() == "true"
    LOG_FORMAT = _get_env("LOG_FORMAT", "%(asctime)s %(levelname)s [%(name)s] %(message)s")


class DevelopmentConfig(BaseConfig):
    """Configuration for local development."""

    DEBUG = True
    TESTING = False


class ProductionConfig(BaseConfig):
    """Configuration for production deployments."""

    DEBUG = False
    TESTING = False


class TestingConfig(BaseConfig):
    """Configuration used by the test-suite: in-memory cache, mock provider."""

    DEBUG = False
    TESTING = True
    CACHE_DATABASE_URL = "sqlite://"
    FX_RATE_PROVIDER = "mock"
    FX_FALLBACK_PROVIDER = None
    CURRENCY_API_MAX_RETRIES = 1
    CURRENCY_API_BACKOFF_SECONDS = 0.0
    SCHEDULER_ENABLED = False


CONFIG_BY_ENV = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(config_name: str | None = None) -> type[BaseConfig]:
    """Return the config class for the requested environment.

    Args:
        config_name: Optional explicit config identifier. If omitted, the
            APP_ENV environment variable is consulted.

    Raises:
        KeyError: If the requested configuration is not defined.
        ValueError: If a configured provider name is not supported.
    """

    env_candidate = config_name if config_name is not None else os.getenv("APP_ENV", "development")
    env_name = (env_candidate or "development").lower()
    try:
        config_cls = CONFIG_BY_ENV[env_name]
    except KeyError as exc:
        raise KeyError(f"Unknown APP_ENV '{env_name}'") from exc

    _validate_providers(config_cls)
    return config_cls


def as_mapping(config_cls: type[BaseConfig]) -> dict[str, Any]:
    """Flatten a config class into a plain dict of its upper-case settings."""

    return {name: getattr(config_cls, name) for name in dir(config_cls) if name.isupper()}


def _validate_providers(config_cls: type[BaseConfig]) -> None:
    primary_normalized = _normalize_provider(config_cls.FX_RATE_PROVIDER)
    if primary_normalized not in SUPPORTED_RATE_PROVIDERS:
        raise ValueError(
            f"Unsupported FX_RATE_PROVIDER '{config_cls.FX_RATE_PROVIDER}'. "
            f"Allowed values: {sorted(SUPPORTED_RATE_PROVIDERS)}"
        )
    config_cls.FX_RATE_PROVIDER = primary_normalized

    fallback_raw = config_cls.FX_FALLBACK_PROVIDER
    if fallback_raw:
        fallback_normalized = _normalize_provider(fallback_raw)
        if fallback_normalized not in SUPPORTED_RATE_PROVIDERS:
            raise ValueError(
                f"Unsupported FX_FALLBACK_PROVIDER '{fallback_raw}'. Allowed values: "
                f"{sorted(SUPPORTED_RATE_PROVIDERS)}"
            )
        config_cls.FX_FALLBACK_PROVIDER = fallback_normalized
    else:
        config_cls.FX_FALLBACK_PROVIDER = None


def _normalize_provider(value: str | None) -> str:
    if not value:
        return ""
    normalized = value.lower()
    return PROVIDER_ALIASES.get(normalized, normalized)
