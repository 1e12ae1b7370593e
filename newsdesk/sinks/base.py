"""
Shared helpers for record-store sinks.
"""
from typing import Iterator, List, Sequence, TypeVar

import httpx

from newsdesk.errors import SinkError

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Split a sequence into lists of at most `size` items."""
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def sink_error_from(sink: str, error: httpx.HTTPError) -> SinkError:
    """Translate an httpx error into a SinkError carrying the status and response body."""
    if isinstance(error, httpx.HTTPStatusError):
        body = error.response.text[:500]
        return SinkError(
            sink,
            f"HTTP {error.response.status_code}: {body}",
            status_code=error.response.status_code,
        )
    return SinkError(sink, str(error) or type(error).__name__)
