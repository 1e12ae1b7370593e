"""
AI rewrite stage for newsdesk.

ArticleRewriter drives a list of generation clients in order (Gemini, then
Groq by default). Each call waits a fixed delay before going out and is
retried with exponential backoff and jitter when the provider throttles it.
When a provider gives up, the next one is tried; only when every provider
has failed does the call raise GenerationError.
"""
import asyncio
import json
import re
from typing import Iterable, Optional, Sequence

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from newsdesk.config import RetryPolicy
from newsdesk.errors import GenerationError, RateLimitError
from newsdesk.extractor.image_extractor import build_image_captions_block
from newsdesk.llm.base import GenerationClient
from newsdesk.models.image import ImageRef
from newsdesk.models.metadata import ArticleMetadata
from newsdesk.prompts import REWRITE_SYSTEM_PROMPT, build_metadata_prompt, build_rewrite_prompt

logger = structlog.get_logger()

CODE_FENCE_PATTERN = re.compile(r'^\s*```[\w-]*\s*$', re.MULTILINE)
TOP_LEVEL_TITLE_PATTERN = re.compile(r'^\s*#\s+[^\n]*\n+')
MARKDOWN_IMAGE_PATTERN = re.compile(r'!\[[^\]]*\]\([^)]*\)')
BULLET_SPACING_PATTERN = re.compile(r'^[ \t]*-[ \t]+', re.MULTILINE)


class GeneratedMetadata(BaseModel):
    """Title, bajada and volanta produced by the metadata prompt."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, extra="ignore")

    title: str = ""
    bajada: str = ""
    volanta: str = ""

    def merge_into(self, metadata: ArticleMetadata) -> ArticleMetadata:
        """Metadata with generated values taking precedence over non-empty extracted ones."""
        return metadata.model_copy(update={
            "title": self.title or metadata.title,
            "summary_text": self.bajada or metadata.summary_text,
            "overline": self.volanta or metadata.overline,
        })


def strip_code_fences(text: str) -> str:
    """Remove ``` fence lines that models wrap around markdown or JSON."""
    return CODE_FENCE_PATTERN.sub('', text).strip()


def clean_rewritten_text(text: str) -> str:
    """Normalize model markdown: no fences, no leading # title, no images, tidy bullets."""
    text = strip_code_fences(text)
    text = TOP_LEVEL_TITLE_PATTERN.sub('', text, count=1)
    text = MARKDOWN_IMAGE_PATTERN.sub('', text)
    text = BULLET_SPACING_PATTERN.sub('- ', text)
    return text.strip()


def parse_metadata_response(text: str) -> GeneratedMetadata:
    """
    Parse the JSON object returned by the metadata prompt.

    Args:
        text: Raw model output, possibly fenced or surrounded by prose

    Returns:
        GeneratedMetadata: Parsed values

    Raises:
        GenerationError: If no valid JSON object can be found
    """
    cleaned = strip_code_fences(text)
    start = cleaned.find('{')
    end = cleaned.rfind('}')
    if start == -1 or end <= start:
        raise GenerationError("Metadata response contains no JSON object")
    try:
        data = json.loads(cleaned[start:end + 1])
        return GeneratedMetadata.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise GenerationError(f"Metadata response is not valid JSON: {e}") from e


class ArticleRewriter:
    """Rewrites article bodies and generates metadata through a provider cascade."""

    def __init__(
        self,
        clients: Sequence[GenerationClient],
        retry_policy: Optional[RetryPolicy] = None,
    ):
        """
        Initialize the rewriter.

        Args:
            clients: Generation clients in fallback order
            retry_policy: Delay and backoff settings for each call
        """
        self.clients = list(clients)
        self.retry_policy = retry_policy or RetryPolicy()

    @property
    def enabled(self) -> bool:
        return bool(self.clients)

    async def close(self) -> None:
        """Close every client."""
        for client in self.clients:
            await client.close()

    async def _call(self, client: GenerationClient, prompt: str, system_prompt: Optional[str]) -> str:
        policy = self.retry_policy
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(RateLimitError),
            stop=stop_after_attempt(policy.max_attempts),
            wait=wait_exponential(multiplier=policy.base_delay_seconds, max=policy.max_delay_seconds)
            + wait_random(0, policy.jitter_seconds),
            reraise=True,
        ):
            with attempt:
                if policy.call_delay_seconds:
                    await asyncio.sleep(policy.call_delay_seconds)
                try:
                    return await client.generate(prompt, system_prompt=system_prompt)
                except RateLimitError:
                    logger.warning(
                        "Rate limited, backing off",
                        provider=client.name,
                        attempt=attempt.retry_state.attempt_number,
                        max_attempts=policy.max_attempts,
                    )
                    raise

    async def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """
        Run a prompt through the provider cascade.

        Returns:
            str: First non-empty response

        Raises:
            GenerationError: If no client is configured or every provider fails
        """
        if not self.clients:
            raise GenerationError("No generation providers configured")

        last_error: Optional[Exception] = None
        for client in self.clients:
            try:
                text = await self._call(client, prompt, system_prompt)
            except GenerationError as e:
                logger.warning("Provider failed, trying next", provider=client.name, error=str(e))
                last_error = e
                continue
            if text and text.strip():
                return text
            logger.warning("Provider returned empty response", provider=client.name)
            last_error = GenerationError(f"{client.name} returned an empty response")

        raise GenerationError(f"All generation providers failed: {last_error}")

    async def rewrite_text(self, text: str, images: Iterable[ImageRef] = ()) -> str:
        """
        Rewrite an article body as Rioplatense Spanish markdown.

        Args:
            text: Extracted article text
            images: In-article images, described to the model for context

        Returns:
            str: Rewritten markdown body

        Raises:
            GenerationError: If every provider fails or the result is empty
        """
        prompt = build_rewrite_prompt(text, build_image_captions_block(images))
        rewritten = clean_rewritten_text(await self.generate(prompt, system_prompt=REWRITE_SYSTEM_PROMPT))
        if not rewritten:
            raise GenerationError("Rewritten text is empty")
        return rewritten

    async def generate_metadata(self, text: str) -> GeneratedMetadata:
        """Generate title, bajada and volanta for an article body."""
        response = await self.generate(build_metadata_prompt(text))
        return parse_metadata_response(response)
