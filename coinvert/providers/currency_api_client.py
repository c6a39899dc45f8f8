from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from coinvert.providers.http_client import HTTPClient, HTTPClientConfig, HTTPClientError

logger = logging.getLogger(__name__)

LATEST_VERSION = "latest"


class CurrencyApiError(RuntimeError):
    """Raised when the currency-api endpoint cannot deliver a usable payload."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CurrencyApiClientConfig:
    """Configuration parameters for the currency-api client.

    `url_template` must contain the `{version}` and `{base}` placeholders;
    `version` is either ``latest`` or an ISO calendar date.
    """

    def __init__(
        self,
        url_template: str,
        timeout: float,
        max_retries: int = 2,
        backoff_seconds: float = 0.5,
    ) -> None:
        if "{version}" not in url_template or "{base}" not in url_template:
            raise ValueError("url_template needs both {version} and {base} placeholders")
        self.url_template = url_template
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds


class CurrencyApiClient:
    """HTTP client for the fawazahmed0 currency-api built on the shared HTTP wrapper."""

    def __init__(self, config: CurrencyApiClientConfig, client: Optional[HTTPClient] = None) -> None:
        self._config = config
        self._client = client or HTTPClient(
            HTTPClientConfig(
                timeout=config.timeout,
                max_retries=config.max_retries,
                backoff_seconds=config.backoff_seconds,
            )
        )

    def build_url(self, base: str, version: str = LATEST_VERSION) -> str:
        return self._config.url_template.format(version=version, base=base.lower())

    def fetch(self, base: str, version: str = LATEST_VERSION) -> Dict[str, Any]:
        url = self.build_url(base, version)
        try:
            return self._client.get(url)
        except HTTPClientError as exc:
            raise CurrencyApiError(str(exc), status_code=exc.status_code) from exc
