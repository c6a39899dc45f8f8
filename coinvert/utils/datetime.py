"""Shared date helpers for UTC timestamps and historical day windows."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta


def utc_now() -> datetime:
    """Return the current UTC datetime."""

    return datetime.now(UTC)


def utc_today() -> date:
    return utc_now().date()


def history_window(today: date, days: int, *, end_offset_days: int = 2) -> list[str]:
    """Return ISO dates for a `days`-long window, newest first.

    The window ends `end_offset_days` before `today` because the upstream
    snapshot for today and yesterday may still be incomplete.
    """

    end_date = today - timedelta(days=end_offset_days)
    return [(end_date - timedelta(days=offset)).isoformat() for offset in range(days)]
