"""Persisted key/value blob cache backing offline fallback."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from coinvert.database import build_engine, build_session_factory, init_schema
from coinvert.models import CacheEntry
from coinvert.services.serialization import (
    DecodeError,
    decode_currency_list,
    encode_currency_list,
)
from coinvert.utils.datetime import utc_now

logger = logging.getLogger(__name__)

LATEST_RATES_KEY = "latest_rates_json"
CURRENCY_LIST_KEY = "available_currencies"


class RateStore:
    """String-keyed blob store.

    The store is an optimization, never a source of truth: reads report
    storage failures as a miss and writes report them as ``False``. Neither
    raises.
    """

    def __init__(self, engine: Engine, session_factory: sessionmaker | None = None) -> None:
        self._engine = engine
        self._session_factory = session_factory or build_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str) -> RateStore:
        engine = build_engine(database_url)
        init_schema(engine)
        return cls(engine)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> RateStore:
        return cls.from_url(str(config.get("CACHE_DATABASE_URL", "sqlite:///coinvert-cache.db")))

    def get(self, key: str) -> str | None:
        try:
            with self._session_factory() as session:
                entry = session.get(CacheEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as exc:
            logger.warning("Cache read for '%s' failed: %s", key, exc)
            return None

    def put(self, key: str, value: str) -> bool:
        try:
            with self._session_factory() as session:
                session.merge(CacheEntry(key=key, value=value, updated_at=utc_now()))
                session.commit()
        except SQLAlchemyError as exc:
            logger.warning("Cache write for '%s' failed: %s", key, exc)
            return False
        return True

    def get_currency_list(self) -> set[str]:
        """Return the last cached currency codes, or an empty set."""

        blob = self.get(CURRENCY_LIST_KEY)
        if blob is None:
            return set()
        try:
            return decode_currency_list(blob)
        except DecodeError as exc:
            logger.warning("Ignoring corrupt cached currency list: %s", exc)
            return set()

    def put_currency_list(self, codes: Iterable[str]) -> bool:
        return self.put(CURRENCY_LIST_KEY, encode_currency_list(codes))

    def dispose(self) -> None:
        self._engine.dispose()
