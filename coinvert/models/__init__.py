"""SQLAlchemy ORM models for the persisted rate cache."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from coinvert.database import Base
from coinvert.utils.datetime import utc_now


class CacheEntry(Base):
    """One serialized blob addressed by a string key."""

    __tablename__ = "cache_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<CacheEntry key={self.key} bytes={len(self.value)}>"
