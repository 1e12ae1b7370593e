"""
HTTP client module for newsdesk.

This module provides an async HTTP client used for feeds and record-store
APIs, with retry logic and timeout handling, plus `fetch_document` for
retrieving article pages. It uses httpx for making HTTP requests and tenacity
for retry logic.
"""
import time
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from newsdesk.errors import FetchError
from newsdesk.models.document import RawDocument

# Set up structured logger
logger = structlog.get_logger()

# Constants
# News sites reject non-browser agents
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
BROWSER_HEADERS = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "es-AR,es;q=0.9,en;q=0.8",
}
DEFAULT_FETCH_TIMEOUT = 10.0  # seconds
DEFAULT_TIMEOUT = 30.0  # seconds
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_MIN_WAIT = 1.0  # seconds
DEFAULT_RETRY_MAX_WAIT = 10.0  # seconds
DEFAULT_RETRY_MULTIPLIER = 1.0

RETRY_EXCEPTIONS = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


class AsyncHTTPClient:
    """
    Async HTTP client for feeds and JSON APIs.

    This class provides a wrapper around httpx with retry logic,
    timeout handling, and proper error handling.
    """

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        retry_min_wait: float = DEFAULT_RETRY_MIN_WAIT,
        retry_max_wait: float = DEFAULT_RETRY_MAX_WAIT,
        retry_multiplier: float = DEFAULT_RETRY_MULTIPLIER,
        default_headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the HTTP client.

        Args:
            user_agent: User agent string to use for requests
            timeout: Request timeout in seconds
            retry_attempts: Maximum number of attempts per request
            retry_min_wait: Minimum wait time between retries in seconds
            retry_max_wait: Maximum wait time between retries in seconds
            retry_multiplier: Multiplier for exponential backoff
            default_headers: Default headers to include in all requests
            transport: Optional httpx transport (used by tests)
        """
        self.user_agent = user_agent or BROWSER_USER_AGENT
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.retry_min_wait = retry_min_wait
        self.retry_max_wait = retry_max_wait
        self.retry_multiplier = retry_multiplier

        self.default_headers = {**BROWSER_HEADERS, **(default_headers or {})}
        self.default_headers["User-Agent"] = self.user_agent

        self.client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers=self.default_headers,
            transport=transport,
        )

    async def __aenter__(self) -> "AsyncHTTPClient":
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def get(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        with_retry: bool = True,
    ) -> httpx.Response:
        """
        Make a GET request to a URL.

        Raises:
            httpx.HTTPError: If the HTTP request fails
        """
        return await self.request(
            "GET", url, headers=headers, params=params, timeout=timeout, with_retry=with_retry
        )

    async def post(
        self,
        url: str,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        with_retry: bool = True,
    ) -> httpx.Response:
        """
        Make a POST request with a JSON body.

        Raises:
            httpx.HTTPError: If the HTTP request fails
        """
        return await self.request(
            "POST", url, json=json, headers=headers, params=params, timeout=timeout,
            with_retry=with_retry,
        )

    async def request(
        self,
        method: str,
        url: str,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        with_retry: bool = True,
    ) -> httpx.Response:
        """
        Make a request, raising for non-2xx responses.

        Args:
            method: HTTP method
            url: URL to request
            json: Optional JSON body
            headers: Optional headers merged over the defaults
            params: Optional query parameters
            timeout: Request timeout in seconds (overrides client default)
            with_retry: Whether to retry transient network errors

        Returns:
            httpx.Response: HTTP response

        Raises:
            httpx.HTTPError: If the request fails (after all retries)
        """
        request_headers = {**self.default_headers}
        if headers:
            request_headers.update(headers)
        request_timeout = httpx.Timeout(timeout or self.timeout)

        async def _send() -> httpx.Response:
            start_time = time.time()
            response = await self.client.request(
                method,
                url,
                json=json,
                headers=request_headers,
                params=params,
                timeout=request_timeout,
            )
            response.raise_for_status()
            logger.debug(
                "HTTP request successful",
                method=method,
                url=url,
                status_code=response.status_code,
                elapsed_seconds=time.time() - start_time,
            )
            return response

        if not with_retry or self.retry_attempts <= 1:
            return await _send()

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_exponential(
                    multiplier=self.retry_multiplier,
                    min=self.retry_min_wait,
                    max=self.retry_max_wait,
                ),
                retry=retry_if_exception_type(RETRY_EXCEPTIONS),
                reraise=True,
            ):
                with attempt:
                    try:
                        return await _send()
                    except RETRY_EXCEPTIONS as e:
                        logger.warning(
                            "HTTP request failed, retrying",
                            method=method,
                            url=url,
                            error=str(e),
                            attempt=attempt.retry_state.attempt_number,
                            max_attempts=self.retry_attempts,
                        )
                        raise
        except RETRY_EXCEPTIONS as e:
            logger.error(
                "HTTP request failed after all retries",
                method=method,
                url=url,
                error=str(e),
                attempts=self.retry_attempts,
            )
            raise


def is_absolute_url(url: str) -> bool:
    """Check that a URL is a syntactically valid absolute http(s) URL."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


async def fetch_document(
    url: str,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    client: Optional[AsyncHTTPClient] = None,
) -> RawDocument:
    """
    Fetch the HTML of an article page.

    One outbound request with a bounded timeout and browser-like headers.
    Network errors, non-2xx statuses and timeouts all surface as FetchError.

    Args:
        url: Absolute URL of the article
        timeout: Request timeout in seconds
        client: Optional shared client (a one-off client is created otherwise)

    Returns:
        RawDocument: Fetched HTML

    Raises:
        FetchError: If the URL is invalid or the request fails
    """
    if not is_absolute_url(url):
        raise FetchError(url, "URL is not a valid absolute http(s) URL")

    logger.debug("Fetching article", url=url, timeout=timeout)
    try:
        if client is not None:
            response = await client.get(url, timeout=timeout, with_retry=False)
        else:
            async with AsyncHTTPClient(timeout=timeout, retry_attempts=1) as one_off:
                response = await one_off.get(url, with_retry=False)
    except httpx.HTTPStatusError as e:
        logger.warning("Article fetch returned error status", url=url, status_code=e.response.status_code)
        raise FetchError(url, f"HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        logger.warning("Article fetch failed", url=url, error=str(e) or type(e).__name__)
        raise FetchError(url, e) from e

    return RawDocument(url=url, html=response.text, status_code=response.status_code)
