"""
Language Model Client Protocol

Defines the text-generation capability consumed by the planning pipeline.
The core treats the client as opaque and unreliable: prompt in, text out,
and any call may fail, time out or return something unusable.
"""

from typing import Any, Protocol


class LanguageModelError(Exception):
    """Raised by a language model client when generation fails."""


class LanguageModelClient(Protocol):
    """
    Protocol for text generation.

    Implementations must raise LanguageModelError (or let any other exception
    escape); callers in the core convert every failure into a fallback.
    """

    async def generate(self, prompt: str, agent_context: dict[str, Any]) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Complete instruction text
            agent_context: Identity of the calling agent and pipeline stage
                (keys: agent_id, name, role, stage)

        Returns:
            Generated text

        Raises:
            LanguageModelError: If generation fails
        """
        ...
