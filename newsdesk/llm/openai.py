"""
OpenAI-compatible generation client.

Used for OpenAI itself and for Groq, which exposes the same chat completions
API under its own base URL.
"""
from typing import Optional

import openai
import structlog
from openai import AsyncOpenAI

from newsdesk.config import LLMConfig
from newsdesk.errors import GenerationError, RateLimitError
from newsdesk.llm.base import GenerationClient

logger = structlog.get_logger()


class OpenAIGenerationClient(GenerationClient):
    """Async generation client for OpenAI-compatible chat completion APIs."""

    def __init__(self, config: LLMConfig, client: Optional[AsyncOpenAI] = None):
        if client is None and not config.has_credentials:
            raise ValueError(f"API key is required for provider {config.provider.value}")

        self.name = config.provider.value
        self.model = config.model_name
        self.max_tokens = config.max_tokens
        self.temperature = config.temperature
        # Retries are handled by the rewriter
        self.client = client or AsyncOpenAI(
            api_key=config.api_key.get_secret_value(),
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            max_retries=0,
        )

        logger.info("OpenAI-compatible generation client initialized", provider=self.name, model=self.model)

    async def close(self) -> None:
        await self.client.close()

    async def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except openai.RateLimitError as e:
            logger.warning("Generation rate limited", provider=self.name, model=self.model)
            raise RateLimitError(f"{self.name} rate limited: {e}") from e
        except openai.OpenAIError as e:
            logger.error("Generation failed", provider=self.name, error=str(e))
            raise GenerationError(f"{self.name} generation failed: {e}") from e

        if not response.choices:
            raise GenerationError(f"{self.name} returned no choices")
        return response.choices[0].message.content or ""
