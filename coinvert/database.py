"""SQLAlchemy engine and session helpers for the rate cache."""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def build_engine(database_url: str, **kwargs: Any) -> Engine:
    """Create an engine usable from the client's worker threads.

    SQLite connections are shared across threads, and an in-memory URL keeps a
    single connection so every session sees the same database.
    """

    options: dict[str, Any] = dict(kwargs)
    if database_url.startswith("sqlite"):
        connect_args = dict(options.pop("connect_args", {}))
        connect_args.setdefault("check_same_thread", False)
        options["connect_args"] = connect_args
        if database_url in {"sqlite://", "sqlite:///:memory:"}:
            options.setdefault("poolclass", StaticPool)
    return create_engine(database_url, **options)


def build_session_factory(engine: Engine) -> sessionmaker:
    """Return a session factory bound to `engine`."""

    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_schema(engine: Engine) -> None:
    """Create any missing tables; existing tables are left untouched."""

    from coinvert import models  # noqa: F401  # Ensure models are registered on the metadata

    Base.metadata.create_all(engine)
