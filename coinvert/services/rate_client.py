"""Rate client coordinating remote providers with the persisted cache."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date
from time import perf_counter
from typing import Any

from coinvert.errors import FetchError, FetchErrorReason
from coinvert.logging import fetch_log_extra
from coinvert.providers import (
    BaseRateProvider,
    HistoricalSeries,
    ProviderError,
    RatePoint,
    RateTable,
    SchemaError,
    normalize_currency,
)
from coinvert.providers.registry import get_provider
from coinvert.services.rate_store import LATEST_RATES_KEY, RateStore
from coinvert.services.serialization import (
    DecodeError,
    decode_latest_tables,
    decode_series,
    encode_latest_tables,
    encode_series,
)
from coinvert.utils.datetime import history_window, utc_today

logger = logging.getLogger(__name__)

CACHE_SOURCE = "cache"


def historical_cache_key(base: str, target: str, days: int) -> str:
    """Cache key for one (base, target, days) historical query."""

    return f"historical_{normalize_currency(base)}_{normalize_currency(target)}_{int(days)}"


class RateClient:
    """Fetch latest and historical rates, falling back to the cache on failure.

    The client keeps no per-request state, so one instance can serve
    concurrent callers. All persisted state lives in the injected `RateStore`.
    """

    def __init__(
        self,
        store: RateStore,
        primary: BaseRateProvider,
        fallback: BaseRateProvider | None = None,
        *,
        max_workers: int = 4,
        end_offset_days: int = 2,
        async_workers: int = 2,
    ) -> None:
        self._store = store
        self._primary = primary
        self._fallback = fallback
        self._max_workers = max(int(max_workers), 1)
        self._end_offset_days = int(end_offset_days)
        self._latest_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=max(int(async_workers), 1), thread_name_prefix="coinvert"
        )

    def get_latest(self, base: str) -> RateTable:
        """Return the latest rate table for `base`.

        Raises:
            FetchError: `MALFORMED_UPSTREAM_SCHEMA` when upstream answered
                without a `base` object, `NO_NETWORK_AND_NO_CACHE` when no
                provider answered and nothing is cached for `base`.
        """

        base_currency = normalize_currency(base)

        for provider in self._providers():
            provider_name = self._provider_name(provider)
            start = perf_counter()
            try:
                table = provider.get_latest(base_currency)
            except SchemaError as exc:
                duration = (perf_counter() - start) * 1000
                logger.error(
                    "Provider returned malformed latest payload: %s",
                    exc,
                    extra=fetch_log_extra(
                        provider=provider_name,
                        base=base_currency,
                        event="rates.fetch",
                        status="malformed",
                        duration_ms=duration,
                        stale=False,
                        error=str(exc),
                    ),
                )
                raise FetchError(
                    FetchErrorReason.MALFORMED_UPSTREAM_SCHEMA, str(exc), base=base_currency
                ) from exc
            except ProviderError as exc:
                duration = (perf_counter() - start) * 1000
                logger.warning(
                    "Provider %s failed to fetch latest rates: %s",
                    provider_name,
                    exc,
                    extra=fetch_log_extra(
                        provider=provider_name,
                        base=base_currency,
                        event="rates.fetch",
                        status="error",
                        duration_ms=duration,
                        stale=False,
                        error=str(exc),
                    ),
                )
                continue

            duration = (perf_counter() - start) * 1000
            logger.info(
                "Provider fetch succeeded",
                extra=fetch_log_extra(
                    provider=provider_name,
                    base=base_currency,
                    event="rates.fetch",
                    status="success",
                    duration_ms=duration,
                    stale=False,
                ),
            )
            self._remember_latest(table)
            return table

        return self._cached_latest(base_currency)

    def get_historical(self, base: str, target: str, days: int) -> HistoricalSeries:
        """Return the day-by-day `base`→`target` series for the last `days` days.

        A cached series for the same arguments is returned without touching
        the network. Days that cannot be fetched are left out, so the series
        may be shorter than `days`, or empty. A non-positive `days` yields an
        empty window.
        """

        base_currency = normalize_currency(base)
        target_currency = normalize_currency(target)
        cache_key = historical_cache_key(base_currency, target_currency, days)

        cached = self._cached_series(cache_key)
        if cached is not None:
            logger.debug(
                "Serving %s from cache",
                cache_key,
                extra=fetch_log_extra(
                    provider=CACHE_SOURCE,
                    base=base_currency,
                    target=target_currency,
                    event="history.cache_hit",
                    status="success",
                    duration_ms=None,
                    stale=False,
                ),
            )
            return cached

        start = perf_counter()
        dates = history_window(
            self._current_date(), max(days, 0), end_offset_days=self._end_offset_days
        )
        points = self._fetch_points(base_currency, target_currency, dates)
        points.sort(key=lambda point: point.date)
        series = HistoricalSeries(base=base_currency, target=target_currency, points=points)

        if not self._store.put(cache_key, encode_series(series)):
            self._log_cache_write_failure(cache_key, base_currency)

        duration = (perf_counter() - start) * 1000
        logger.info(
            "Fetched %s of %s days for %s/%s",
            len(points),
            days,
            base_currency,
            target_currency,
            extra=fetch_log_extra(
                provider=self._provider_name(self._primary),
                base=base_currency,
                target=target_currency,
                event="history.fetch",
                status="success" if points else "empty",
                duration_ms=duration,
                stale=False,
            ),
        )
        return series

    def get_latest_async(self, base: str) -> Future[RateTable]:
        """Run `get_latest` on a worker thread and return its future."""

        return self._executor.submit(self.get_latest, base)

    def get_historical_async(self, base: str, target: str, days: int) -> Future[HistoricalSeries]:
        """Run `get_historical` on a worker thread and return its future."""

        return self._executor.submit(self.get_historical, base, target, days)

    def cached_currencies(self) -> set[str]:
        """Last cached currency codes; never touches the network."""

        return self._store.get_currency_list()

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    def _providers(self) -> Iterable[BaseRateProvider]:
        yield self._primary
        if self._fallback is not None:
            yield self._fallback

    def _remember_latest(self, table: RateTable) -> None:
        with self._latest_lock:
            tables = self._cached_latest_tables()
            tables[table.base] = table
            if not self._store.put(LATEST_RATES_KEY, encode_latest_tables(tables)):
                self._log_cache_write_failure(LATEST_RATES_KEY, table.base)

            codes = self._store.get_currency_list() | table.codes()
            if not self._store.put_currency_list(codes):
                self._log_cache_write_failure("currency list", table.base)

    def _cached_latest_tables(self) -> dict[str, RateTable]:
        blob = self._store.get(LATEST_RATES_KEY)
        if blob is None:
            return {}
        try:
            return decode_latest_tables(blob)
        except DecodeError as exc:
            logger.warning("Ignoring corrupt cached latest rates: %s", exc)
            return {}

    def _cached_latest(self, base_currency: str) -> RateTable:
        cached = self._cached_latest_tables().get(base_currency)
        if cached is None:
            raise FetchError(
                FetchErrorReason.NO_NETWORK_AND_NO_CACHE,
                f"Unable to fetch latest {base_currency} rates and no cached table is available",
                base=base_currency,
            )

        logger.warning(
            "Returning cached %s rates after provider failure",
            base_currency,
            extra=fetch_log_extra(
                provider=CACHE_SOURCE,
                base=base_currency,
                event="rates.fallback",
                status="stale",
                duration_ms=None,
                stale=True,
            ),
        )
        return cached

    def _cached_series(self, cache_key: str) -> HistoricalSeries | None:
        blob = self._store.get(cache_key)
        if blob is None:
            return None
        try:
            return decode_series(blob)
        except DecodeError as exc:
            logger.warning("Ignoring corrupt cached series %s: %s", cache_key, exc)
            return None

    def _fetch_points(self, base: str, target: str, dates: list[str]) -> list[RatePoint]:
        workers = min(self._max_workers, len(dates))
        if workers <= 1:
            results = [self._fetch_day(base, target, day) for day in dates]
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="coinvert-day") as pool:
                results = list(pool.map(lambda day: self._fetch_day(base, target, day), dates))
        return [point for point in results if point is not None]

    def _fetch_day(self, base: str, target: str, day: str) -> RatePoint | None:
        for provider in self._providers():
            try:
                rate = provider.get_rate_on(base, target, day)
            except SchemaError as exc:
                logger.debug("Skipping %s for %s/%s: %s", day, base, target, exc)
                return None
            except ProviderError as exc:
                logger.debug(
                    "Provider %s could not fetch %s for %s/%s: %s",
                    self._provider_name(provider),
                    day,
                    base,
                    target,
                    exc,
                )
                continue
            return RatePoint(date=day, rate=rate)
        return None

    def _log_cache_write_failure(self, key: str, base_currency: str) -> None:
        logger.warning(
            "Could not persist %s; continuing without cache",
            key,
            extra=fetch_log_extra(
                provider=CACHE_SOURCE,
                base=base_currency,
                event="cache.write_failed",
                status="error",
                duration_ms=None,
                stale=False,
            ),
        )

    @staticmethod
    def _current_date() -> date:
        return utc_today()

    @staticmethod
    def _provider_name(provider: BaseRateProvider | None) -> str:
        if provider is None:
            return "unknown"
        return getattr(provider, "name", provider.__class__.__name__)


def create_rate_client(config: Mapping[str, Any], store: RateStore | None = None) -> RateClient:
    """Build a RateClient (and its store, unless given) from config values."""

    rate_store = store or RateStore.from_config(config)
    primary_name = config.get("FX_RATE_PROVIDER")
    primary = get_provider(primary_name, config)

    fallback_provider = None
    fallback_name = config.get("FX_FALLBACK_PROVIDER")
    if fallback_name and fallback_name != primary_name:
        try:
            fallback_provider = get_provider(fallback_name, config)
        except ProviderError as exc:
            logger.warning("Configured fallback provider '%s' unavailable: %s", fallback_name, exc)

    return RateClient(
        store=rate_store,
        primary=primary,
        fallback=fallback_provider,
        max_workers=int(config.get("HISTORY_MAX_WORKERS", 4)),
        end_offset_days=int(config.get("HISTORY_END_OFFSET_DAYS", 2)),
    )
