"""
Base classes and interfaces for LLM generation.
"""
from typing import Optional, Protocol


class GenerationClient(Protocol):
    """Protocol defining the interface for LLM generation clients."""

    name: str

    async def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """
        Generate text based on a prompt.

        Args:
            prompt: The user prompt.
            system_prompt: Optional system prompt to guide behavior.

        Returns:
            str: The generated text.

        Raises:
            RateLimitError: If the provider throttled the request.
            GenerationError: For any other failure.
        """
        ...

    async def close(self) -> None:
        """Close the client and release resources."""
        ...
