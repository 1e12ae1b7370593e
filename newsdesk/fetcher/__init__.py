"""
Fetcher package for newsdesk.

This package provides the async HTTP client shared by the feed reader and the
record-store sinks, and `fetch_document` for retrieving article pages.
"""
from newsdesk.fetcher.http_client import (
    BROWSER_USER_AGENT,
    DEFAULT_FETCH_TIMEOUT,
    AsyncHTTPClient,
    fetch_document,
    is_absolute_url,
)

__all__ = [
    "BROWSER_USER_AGENT",
    "DEFAULT_FETCH_TIMEOUT",
    "AsyncHTTPClient",
    "fetch_document",
    "is_absolute_url",
]
