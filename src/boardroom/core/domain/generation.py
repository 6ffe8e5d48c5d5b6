"""Bounded language model calls shared by the pipeline stages."""

import asyncio
from typing import Any

from boardroom.core.interfaces.llm import LanguageModelClient

DEFAULT_LLM_TIMEOUT = 20.0


async def generate_or_none(
    llm: LanguageModelClient | None,
    prompt: str,
    agent_context: dict[str, Any],
    timeout: float,
    logger: Any,
) -> str | None:
    """
    Call the language model with a timeout and swallow every failure.

    Args:
        llm: Client to call (None means no client is configured)
        prompt: Complete instruction text
        agent_context: Agent identity and stage
        timeout: Seconds before the call is abandoned
        logger: Bound structlog logger of the calling component

    Returns:
        Non-empty generated text, or None when the caller must fall back
    """
    if llm is None:
        return None
    stage = agent_context.get("stage")
    try:
        text = await asyncio.wait_for(llm.generate(prompt, agent_context), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("llm_call_timeout", stage=stage, timeout_seconds=timeout)
        return None
    except Exception as e:
        logger.warning(
            "llm_call_failed",
            stage=stage,
            error_type=type(e).__name__,
            error=str(e)[:200],
        )
        return None

    if not isinstance(text, str) or not text.strip():
        logger.warning("llm_call_malformed", stage=stage, response_type=type(text).__name__)
        return None
    return text
