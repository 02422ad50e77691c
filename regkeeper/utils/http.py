"""
HTTP client utilities for regkeeper.

This module provides the asynchronous transport shared by the GitHub and
npm clients: retries with exponential backoff, ``Retry-After`` handling,
an optional minimum delay between requests and a cap on in-flight
requests.
"""

from __future__ import annotations

import time
import httpx
import random
import asyncio
from typing import Any, Dict, Mapping, Optional, Type

from regkeeper.utils.logger import get_logger
from regkeeper.__version__ import __version__
from regkeeper.exceptions import NetworkError, NotFoundError
from regkeeper.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_RETRY_ATTEMPTS,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")


class HTTPClient:
    """Asynchronous HTTP client with retries, rate limiting, and concurrency control.

    Args:
        timeout: Request timeout in seconds.
        max_retries: Retries after the first attempt for each request,
            unless a call overrides it with ``retries=``.
        rate_limit_delay: Minimum delay (seconds) between requests.
        verify_ssl: Whether to verify SSL certificates.
        user_agent: Custom User-Agent header value.
        headers: Extra headers sent with every request.
        max_concurrency: Maximum number of concurrent requests.

    Example:
        >>> async with HTTPClient(headers={"Accept": "application/json"}) as client:
        ...     data = await client.get_json("https://registry.npmjs.org/left-pad")
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_RETRY_ATTEMPTS - 1,
        rate_limit_delay: float = 0.0,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        max_concurrency: int = 10,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max(0, max_retries)
        self.rate_limit_delay = rate_limit_delay
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.headers: Dict[str, str] = dict(headers or {})
        self.max_concurrency = max_concurrency

        self._client: Optional[httpx.AsyncClient] = None
        self._last_request_time: float = 0.0
        self._rate_limit_lock = asyncio.Lock()
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._max_429_retries: int = 5

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        """Initialize the underlying httpx client if needed."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent, **self.headers},
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _rate_limit(self) -> None:
        """Enforce a minimum delay between outgoing requests."""
        if self.rate_limit_delay <= 0:
            return

        async with self._rate_limit_lock:
            now = time.time()
            elapsed = now - self._last_request_time

            if elapsed < self.rate_limit_delay:
                delay = self.rate_limit_delay - elapsed
                self._last_request_time = now + delay
                await asyncio.sleep(delay)
            else:
                self._last_request_time = now

    @staticmethod
    def _retry_after(response: httpx.Response) -> Optional[int]:
        """Return the server-requested wait for a throttled response, if any.

        GitHub signals secondary rate limits with 403 plus ``Retry-After``;
        everything else uses 429.
        """
        if response.status_code == 429:
            raw = response.headers.get("Retry-After", "1")
        elif response.status_code == 403 and "Retry-After" in response.headers:
            raw = response.headers["Retry-After"]
        else:
            return None

        try:
            return max(0, int(raw))
        except (TypeError, ValueError):
            return 1

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        *,
        retries: Optional[int] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute an HTTP request with retry and backoff logic.

        Args:
            method: HTTP method.
            url: Target URL.
            retries: Per-call override of :attr:`max_retries`; ``0`` makes a
                single attempt.
            **kwargs: Forwarded to :meth:`httpx.AsyncClient.request`.

        Raises:
            NotFoundError: The server answered 404 (never retried).
            NetworkError: Any other 4xx, or all attempts failed.
        """
        await self._ensure_client()
        assert self._client is not None

        clean_url = url.strip().strip("\"'")
        max_retries = self.max_retries if retries is None else max(0, retries)
        last_exc: Optional[Exception] = None
        retry_429_count = 0

        attempt = 0
        while attempt <= max_retries:
            try:
                await self._rate_limit()

                async with self._semaphore:
                    response = await self._client.request(method, clean_url, **kwargs)

                retry_after = self._retry_after(response)
                if retry_after is not None:
                    retry_429_count += 1
                    if retry_429_count > self._max_429_retries:
                        raise NetworkError(
                            f"Rate limit exceeded after {self._max_429_retries} retries",
                            url=clean_url,
                            status_code=response.status_code,
                        )
                    logger.warning(
                        "Rate limited (%d), retrying after %ds (%d/%d)",
                        response.status_code,
                        retry_after,
                        retry_429_count,
                        self._max_429_retries,
                    )
                    await asyncio.sleep(retry_after)
                    # Throttling waits do not use up an attempt
                    continue

                if response.status_code == 404:
                    raise NotFoundError(
                        f"Resource not found: {clean_url}",
                        url=clean_url,
                        status_code=404,
                    )

                if response.status_code >= 400:
                    response.raise_for_status()

                return response

            except httpx.TimeoutException as exc:
                last_exc = exc
                logger.warning(
                    "Request timeout (%d/%d): %s",
                    attempt + 1,
                    max_retries + 1,
                    clean_url,
                )

            except httpx.NetworkError as exc:
                last_exc = exc
                logger.warning(
                    "Network error (%d/%d): %s",
                    attempt + 1,
                    max_retries + 1,
                    exc,
                )

            except httpx.HTTPStatusError as exc:
                if 400 <= exc.response.status_code < 500:
                    raise NetworkError(
                        f"HTTP {exc.response.status_code} error for {clean_url}",
                        url=clean_url,
                        status_code=exc.response.status_code,
                        response_body=exc.response.text,
                    ) from exc
                last_exc = exc
                logger.warning(
                    "HTTP %d error (%d/%d): %s",
                    exc.response.status_code,
                    attempt + 1,
                    max_retries + 1,
                    clean_url,
                )

            if attempt < max_retries:
                delay = (2**attempt) + random.uniform(0.0, 0.3)
                logger.debug("Retrying in %.2fs", delay)
                await asyncio.sleep(delay)
            attempt += 1

        raise NetworkError(
            f"Request failed after {max_retries + 1} attempts: {clean_url}",
            url=clean_url,
        ) from last_exc

    async def get(
        self,
        url: str,
        *,
        retries: Optional[int] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Perform a GET request with retry logic."""
        return await self._request_with_retry("GET", url, retries=retries, **kwargs)

    async def get_json(
        self,
        url: str,
        *,
        retries: Optional[int] = None,
        expected_type: Type[Any] = dict,
        **kwargs: Any,
    ) -> Any:
        """Fetch a URL and parse the response as JSON.

        Args:
            url: Target URL.
            retries: Per-call retry override.
            expected_type: Required top-level JSON type (``dict`` or
                ``list``).

        Raises:
            NetworkError: The body is not JSON or has the wrong top-level type.
        """
        response = await self.get(url, retries=retries, **kwargs)

        try:
            data = response.json()
        except Exception as exc:
            raise NetworkError(
                f"Invalid JSON response from {url}",
                url=url,
                response_body=response.text,
            ) from exc

        if not isinstance(data, expected_type):
            raise NetworkError(
                f"Expected JSON {expected_type.__name__} from {url}",
                url=url,
                response_body=response.text,
            )

        return data
