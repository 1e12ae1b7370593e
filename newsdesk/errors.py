"""
Exception types for the newsdesk pipeline.

Extraction-layer functions never raise these past their own boundary; they
return sentinels (None or empty string) instead. The batch driver is the only
place that observes them and turns them into per-article skip decisions.
"""
from typing import Optional, Union


class NewsdeskError(Exception):
    """Base class for all pipeline errors."""


class FetchError(NewsdeskError):
    """Network error, timeout or non-2xx response while fetching a URL."""

    def __init__(self, url: str, cause: Optional[Union[BaseException, str]] = None):
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to fetch {url}: {cause}")


class ExtractionInsufficient(NewsdeskError):
    """Extracted article text is too short to be worth rewriting."""

    def __init__(self, url: str, length: int, minimum: int):
        self.url = url
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"Insufficient content for {url}: {length} chars (minimum {minimum})"
        )


class StructureInputInvalid(NewsdeskError):
    """The content structurer was given no usable body text."""


class GenerationError(NewsdeskError):
    """A generative-AI call failed or returned unusable output."""


class RateLimitError(GenerationError):
    """The AI provider throttled the request (HTTP 429)."""


class SinkError(NewsdeskError):
    """A record store (Airtable, Supabase) rejected a write."""

    def __init__(self, sink: str, message: str, status_code: Optional[int] = None):
        self.sink = sink
        self.status_code = status_code
        super().__init__(f"{sink}: {message}")
