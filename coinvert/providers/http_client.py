"""Shared HTTP client wrapper with timeouts, retries, backoff, and jitter."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import requests
from requests import Response, Session
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)


class HTTPClientError(RuntimeError):
    """Raised when the HTTP client cannot satisfy a request."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        # A 4xx (typically 404 for an unpublished date) will not change on retry.
        return self.status_code is None or self.status_code >= 500


@dataclass(frozen=True)
class HTTPClientConfig:
    """Configuration for the shared HTTP client."""

    timeout: float = 5.0
    max_retries: int = 2
    backoff_seconds: float = 0.5
    backoff_jitter: float = 0.2


class HTTPClient:
    """Small JSON-over-HTTP client that applies retry/backoff/jitter policies.

    Only a 2xx response whose body is a non-empty JSON object counts as a
    success; everything else raises `HTTPClientError`.
    """

    def __init__(
        self,
        config: HTTPClientConfig,
        session: Optional[Session] = None,
    ) -> None:
        self._config = config
        self._session = session or requests.Session()

    def get(self, url: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        attempt = 0
        last_error: Optional[Exception] = None
        max_retries = max(self._config.max_retries, 1)

        while attempt < max_retries:
            attempt += 1
            try:
                response = self._session.get(url, params=params, timeout=self._config.timeout)
                return self._handle_response(response)
            except (RequestException, HTTPClientError) as exc:
                last_error = exc
                if isinstance(exc, HTTPClientError) and not exc.retryable:
                    break
                if attempt >= max_retries:
                    break
                sleep_for = self._compute_backoff(attempt)
                logger.warning(
                    "HTTP request to %s failed (attempt %s/%s): %s. Retrying in %.2fs.",
                    url,
                    attempt,
                    max_retries,
                    exc,
                    sleep_for,
                )
                time.sleep(sleep_for)

        status_code = last_error.status_code if isinstance(last_error, HTTPClientError) else None
        raise HTTPClientError(
            f"Failed to fetch {url}: {last_error}", status_code=status_code
        ) from last_error

    def close(self) -> None:
        self._session.close()

    def _compute_backoff(self, attempt: int) -> float:
        base = self._config.backoff_seconds * (2 ** (attempt - 1))
        jitter = random.uniform(-self._config.backoff_jitter, self._config.backoff_jitter)
        delay = max(base + jitter, 0.0)
        return delay

    @staticmethod
    def _handle_response(response: Response) -> Dict[str, Any]:
        status = response.status_code
        if status >= 500:
            raise HTTPClientError(f"Server error {status}", status_code=status)
        if status >= 400:
            raise HTTPClientError(f"Client error {status}: {response.text}", status_code=status)
        if not 200 <= status < 300:
            raise HTTPClientError(f"Unexpected status {status}", status_code=status)

        if not (response.text or "").strip():
            raise HTTPClientError("Empty response body", status_code=status)

        try:
            payload = response.json()
        except ValueError as exc:
            raise HTTPClientError("Invalid JSON response", status_code=status) from exc

        if not isinstance(payload, dict):
            raise HTTPClientError("Response body is not a JSON object", status_code=status)

        return payload
