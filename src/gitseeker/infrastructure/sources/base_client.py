"""
Base API Client - Common HTTP request pattern for registry clients.

Provides a reusable base class with:
- httpx.AsyncClient management
- Rate-limit detection (raised as RateLimitError so callers stop early)
- Expected-status short-circuit (e.g. 404 = absent package)
- Consistent error handling and logging

No request is ever retried. A failed request yields None and the calling
source client decides whether to move on to its next strategy.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from typing_extensions import Self

from gitseeker.core.config import get_config
from gitseeker.core.exceptions import RateLimitError

logger = logging.getLogger(__name__)


class BaseAPIClient:
    """
    Base class for registry API clients.

    Subclasses should set `_service_name` and can override:
    - `_is_rate_limited()`: Detect the registry's rate-limit response
    - `_handle_expected_status()`: Handle service-specific status codes (e.g., 404)
    - `_parse_response()`: Custom response processing

    Example:
        class MyClient(BaseAPIClient):
            _service_name = "MyRegistry"

            def __init__(self):
                super().__init__(base_url="https://api.example.com")

            async def get_item(self, item_id: str) -> dict | None:
                return await self._make_request(f"/items/{item_id}")
    """

    _service_name: str = "API"

    def __init__(
        self,
        base_url: str = "",
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        deep_search_delay: float | None = None,
    ) -> None:
        """
        Initialize base client.

        Args:
            base_url: Base URL for the API (optional, can pass full URLs)
            timeout: Request timeout in seconds (default from config)
            headers: Default headers for all requests
            deep_search_delay: Pause between sequential deep-search requests
                               (default from config)
        """
        config = get_config()
        self._base_url = base_url.rstrip("/")
        self._timeout = config["timeout"] if timeout is None else timeout
        self._deep_search_delay = (
            config["deep_search_delay"] if deep_search_delay is None else deep_search_delay
        )
        default_headers = {
            "User-Agent": config["user_agent"],
            "Accept": "application/json",
        }
        default_headers.update(headers or {})
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            headers=default_headers,
            follow_redirects=True,
            limits=httpx.Limits(
                max_connections=20,
                max_keepalive_connections=10,
                keepalive_expiry=30.0,
            ),
        )

    def _build_url(self, url: str) -> str:
        """Build full URL from path or full URL."""
        if url.startswith(("http://", "https://")):
            return url
        return f"{self._base_url}{url}"

    async def _make_request(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        expect_json: bool = True,
    ) -> Any:
        """
        Make a single GET request.

        Args:
            url: Full URL or path (appended to base_url)
            params: Query string parameters
            headers: Additional headers for this request
            expect_json: If True, parse response as JSON; otherwise return text

        Returns:
            Parsed JSON, response text, or None on transport/HTTP/parse error

        Raises:
            RateLimitError: The registry signalled rate limiting
        """
        full_url = self._build_url(url)
        try:
            response = await self._client.get(full_url, params=params, headers=headers or {})

            if self._is_rate_limited(response):
                logger.warning(f"{self._service_name}: rate limit reached (HTTP {response.status_code})")
                raise RateLimitError(
                    service=self._service_name,
                    retry_after=self._get_retry_after(response),
                )

            expected = self._handle_expected_status(response, full_url)
            if expected is not _CONTINUE:
                return expected

            response.raise_for_status()
            return self._parse_response(response, expect_json)

        except httpx.HTTPStatusError as e:
            logger.warning(
                f"{self._service_name} HTTP error {e.response.status_code}: {e.response.reason_phrase}"
            )
            return None
        except httpx.RequestError as e:
            logger.warning(f"{self._service_name} request failed: {e}")
            return None
        except ValueError as e:
            logger.warning(f"{self._service_name} returned malformed JSON: {e}")
            return None

    def _is_rate_limited(self, response: httpx.Response) -> bool:
        """Detect rate limiting. Default: HTTP 429."""
        return response.status_code == 429

    def _handle_expected_status(self, response: httpx.Response, url: str) -> Any:
        """
        Handle expected non-200 status codes.

        Override in subclasses for service-specific behavior.
        Return a value to short-circuit (e.g., None for 404).
        Return the sentinel _CONTINUE to continue normal processing.
        """
        return _CONTINUE

    def _parse_response(self, response: httpx.Response, expect_json: bool) -> Any:
        """Parse response body. Override for custom extraction logic."""
        if expect_json:
            return response.json()
        return response.text

    @staticmethod
    def _get_retry_after(response: httpx.Response) -> float | None:
        """Extract Retry-After from response headers, if present."""
        try:
            value = response.headers.get("Retry-After")
            return float(value) if value is not None else None
        except (ValueError, TypeError):
            return None

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


# Sentinel object to indicate "continue normal processing" from _handle_expected_status
_CONTINUE = object()
