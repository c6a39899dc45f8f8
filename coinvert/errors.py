"""Package-wide error types surfaced to callers of the rate layer."""

from __future__ import annotations

from enum import Enum


class CoinvertError(Exception):
    """Base class for errors raised by the Coinvert rate layer."""


class FetchErrorReason(str, Enum):
    """Why a top-level fetch could not produce a value."""

    NO_NETWORK_AND_NO_CACHE = "no_network_and_no_cache"
    MALFORMED_UPSTREAM_SCHEMA = "malformed_upstream_schema"


DEFAULT_REASON_MESSAGES: dict[FetchErrorReason, str] = {
    FetchErrorReason.NO_NETWORK_AND_NO_CACHE: "Rates unavailable: upstream failed and nothing is cached.",
    FetchErrorReason.MALFORMED_UPSTREAM_SCHEMA: "Upstream payload did not have the expected shape.",
}


class FetchError(CoinvertError):
    """Raised when RateClient cannot return any data for a request."""

    def __init__(
        self,
        reason: FetchErrorReason,
        message: str | None = None,
        *,
        base: str | None = None,
    ) -> None:
        self.reason = reason
        self.base = base
        self.message = message or DEFAULT_REASON_MESSAGES[reason]
        super().__init__(self.message)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<FetchError reason={self.reason.value} base={self.base}>"
