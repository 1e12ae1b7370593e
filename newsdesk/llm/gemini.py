"""
Google Gemini generation client (REST API over httpx).
"""
from typing import Optional

import httpx
import structlog

from newsdesk.config import LLMConfig
from newsdesk.errors import GenerationError, RateLimitError
from newsdesk.llm.base import GenerationClient

logger = structlog.get_logger()

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiGenerationClient(GenerationClient):
    """Async generation client for the Gemini generateContent endpoint."""

    def __init__(self, config: LLMConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        if not config.has_credentials:
            raise ValueError("API key is required for provider gemini")

        self.name = config.provider.value
        self.base_url = (config.base_url or GEMINI_API_URL).rstrip("/")
        self.model = config.model_name
        self.temperature = config.temperature
        self.max_tokens = config.max_tokens
        self._api_key = config.api_key.get_secret_value()
        self._client = httpx.AsyncClient(timeout=config.timeout_seconds, transport=transport)

        logger.info("Gemini generation client initialized", model=self.model)

    async def close(self) -> None:
        await self._client.aclose()

    async def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_tokens,
            },
        }
        if system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}

        try:
            resp = await self._client.post(url, json=payload, params={"key": self._api_key})
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                logger.warning("Generation rate limited", provider=self.name, model=self.model)
                raise RateLimitError("gemini rate limited (HTTP 429)") from e
            logger.error("Gemini generation failed", status_code=e.response.status_code, model=self.model)
            raise GenerationError(f"gemini returned HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Gemini generation failed", error=str(e), model=self.model)
            raise GenerationError(f"gemini request failed: {e}") from e

        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError("gemini response has no candidates") from e
        return "".join(part.get("text", "") for part in parts)
