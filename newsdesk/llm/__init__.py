"""
LLM generation module.
"""
from typing import List, Sequence

import structlog

from newsdesk.config import LLMConfig, LLMProvider
from newsdesk.llm.base import GenerationClient
from newsdesk.llm.gemini import GeminiGenerationClient
from newsdesk.llm.openai import OpenAIGenerationClient

logger = structlog.get_logger()


def get_generation_client(config: LLMConfig) -> GenerationClient:
    """Factory to get the appropriate generation client."""
    if config.provider == LLMProvider.GEMINI:
        return GeminiGenerationClient(config)
    elif config.provider in (LLMProvider.GROQ, LLMProvider.OPENAI):
        return OpenAIGenerationClient(config)
    else:
        raise ValueError(f"Unsupported LLM provider: {config.provider}")


def build_generation_clients(configs: Sequence[LLMConfig]) -> List[GenerationClient]:
    """Clients for every provider that has an API key, in configured order."""
    clients = []
    for config in configs:
        if not config.has_credentials:
            logger.debug("Skipping LLM provider without API key", provider=config.provider.value)
            continue
        clients.append(get_generation_client(config))
    return clients


__all__ = [
    "GeminiGenerationClient",
    "GenerationClient",
    "OpenAIGenerationClient",
    "build_generation_clients",
    "get_generation_client",
]
