"""
LiteLLM Language Model Client

Implements the LanguageModelClient protocol on top of LiteLLM with YAML
configuration: model aliases, per-model parameters, stage-specific model
selection and a retry policy with exponential backoff.
"""

import asyncio
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import litellm
import structlog
import yaml

from boardroom.core.interfaces.llm import LanguageModelError

ALLOWED_PARAMS = ("temperature", "top_p", "max_tokens", "frequency_penalty", "presence_penalty")


@dataclass
class RetryPolicy:
    """Retry policy configuration."""

    max_attempts: int = 3
    backoff_multiplier: float = 2.0
    timeout: int = 30
    retry_on_errors: list[str] = field(default_factory=list)


class LiteLLMClient:
    """
    Language model client backed by LiteLLM.

    ``complete`` returns a result dict and never raises; ``generate``
    implements the core protocol and raises LanguageModelError on failure.
    """

    def __init__(self, config_path: str = "configs/llm_config.yaml"):
        """
        Initialize the client from a YAML configuration file.

        Args:
            config_path: Path to YAML configuration file

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        self.logger = structlog.get_logger().bind(component="litellm_client")
        self._load_config(config_path)
        self.logger.info(
            "llm_client_initialized",
            default_model=self.default_model,
            model_aliases=list(self.models.keys()),
        )

    def _load_config(self, config_path: str) -> None:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"LLM config not found: {config_path}")

        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)

        if not isinstance(config, dict):
            raise ValueError(f"Config file is empty or invalid: {config_path}")

        self.default_model = config.get("default_model", "main")
        self.models = config.get("models", {})
        self.model_params = config.get("model_params", {})
        self.default_params = config.get("default_params", {})
        self.stage_models = config.get("stage_models", {})

        if not self.models:
            raise ValueError("Config must define at least one model in 'models' section")

        retry_config = config.get("retry_policy", {})
        self.retry_policy = RetryPolicy(
            max_attempts=retry_config.get("max_attempts", 3),
            backoff_multiplier=retry_config.get("backoff_multiplier", 2.0),
            timeout=retry_config.get("timeout", 30),
            retry_on_errors=retry_config.get("retry_on_errors", []),
        )
        self.logging_config = config.get("logging", {})

    def _resolve_model(self, model_alias: str | None) -> str:
        alias = model_alias or self.default_model
        return self.models.get(alias, alias)

    def _get_model_parameters(self, model: str) -> dict[str, Any]:
        """Exact model match, then model family prefix, then defaults."""
        if model in self.model_params:
            return dict(self.model_params[model])
        for model_key, params in self.model_params.items():
            if model.startswith(model_key):
                return dict(params)
        return dict(self.default_params)

    async def complete(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """
        Perform a completion with retry logic.

        Args:
            messages: List of message dicts with 'role' and 'content'
            model: Model alias or None (uses default)
            **kwargs: Parameter overrides (temperature, max_tokens, ...)

        Returns:
            Dict with:
            - success: bool
            - content: str (if successful)
            - usage: Dict with token counts
            - error / error_type: str (if failed)
        """
        actual_model = self._resolve_model(model)
        merged = {**self._get_model_parameters(actual_model), **kwargs}
        params = {k: v for k, v in merged.items() if k in ALLOWED_PARAMS}

        for attempt in range(self.retry_policy.max_attempts):
            try:
                start_time = time.time()
                self.logger.info(
                    "llm_completion_started",
                    model=actual_model,
                    attempt=attempt + 1,
                    message_count=len(messages),
                )
                response = await litellm.acompletion(
                    model=actual_model,
                    messages=messages,
                    timeout=self.retry_policy.timeout,
                    **params,
                )

                content = response.choices[0].message.content
                usage = getattr(response, "usage", {})
                if isinstance(usage, dict):
                    token_stats = usage
                else:
                    token_stats = {
                        "total_tokens": getattr(usage, "total_tokens", 0),
                        "prompt_tokens": getattr(usage, "prompt_tokens", 0),
                        "completion_tokens": getattr(usage, "completion_tokens", 0),
                    }
                latency_ms = int((time.time() - start_time) * 1000)

                if self.logging_config.get("log_token_usage", True):
                    self.logger.info(
                        "llm_completion_success",
                        model=actual_model,
                        tokens=token_stats.get("total_tokens", 0),
                        latency_ms=latency_ms,
                    )
                return {
                    "success": True,
                    "content": content,
                    "usage": token_stats,
                    "model": actual_model,
                    "latency_ms": latency_ms,
                }

            except Exception as e:
                error_type = type(e).__name__
                error_msg = str(e)
                should_retry = attempt < self.retry_policy.max_attempts - 1 and any(
                    err in error_type or err in error_msg for err in self.retry_policy.retry_on_errors
                )
                if should_retry:
                    backoff_time = self.retry_policy.backoff_multiplier**attempt
                    self.logger.warning(
                        "llm_completion_retry",
                        model=actual_model,
                        error_type=error_type,
                        attempt=attempt + 1,
                        backoff_seconds=backoff_time,
                    )
                    await asyncio.sleep(backoff_time)
                else:
                    self.logger.error(
                        "llm_completion_failed",
                        model=actual_model,
                        error_type=error_type,
                        error=error_msg[:200],
                        attempts=attempt + 1,
                    )
                    return {
                        "success": False,
                        "error": error_msg,
                        "error_type": error_type,
                        "model": actual_model,
                    }

        return {"success": False, "error": "Max retries exceeded", "model": actual_model}

    async def generate(self, prompt: str, agent_context: dict[str, Any]) -> str:
        """
        Generate text for a pipeline prompt.

        The agent's identity becomes the system message; the pipeline stage
        selects the model alias from ``stage_models``.

        Raises:
            LanguageModelError: If the completion fails or returns no text
        """
        system = (
            f"You are {agent_context.get('name', 'an assistant')}, "
            f"{agent_context.get('role', 'a business specialist')}."
        )
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]
        model = self.stage_models.get(agent_context.get("stage", ""))
        result = await self.complete(messages, model=model)
        if not result.get("success"):
            raise LanguageModelError(result.get("error", "Unknown language model error"))
        content = result.get("content")
        if not isinstance(content, str) or not content.strip():
            raise LanguageModelError("Language model returned an empty response")
        return content
