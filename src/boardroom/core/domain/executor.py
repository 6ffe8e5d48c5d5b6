"""
Step Executor

Runs one plan step. The step's owning agent is asked to produce the output
through the language model; when that fails for any reason (error, timeout,
empty or non-text response) the output comes from the static template
library and the step is flagged ``used_fallback``. Only an unexpected
internal error marks the step failed. Every step leaves this module in a
terminal state with its duration recorded.
"""

from collections.abc import Callable

import structlog

from boardroom.core.domain.agents import get_profile
from boardroom.core.domain.generation import DEFAULT_LLM_TIMEOUT, generate_or_none
from boardroom.core.domain.models import IntentAnalysis, PlanStep, StepStatus
from boardroom.core.domain.templates import render_step_template
from boardroom.core.interfaces.llm import LanguageModelClient
from boardroom.core.prompts.pipeline_prompts import STEP_EXECUTION_PROMPT


class StepExecutor:
    def __init__(
        self,
        llm: LanguageModelClient | None = None,
        timeout: float = DEFAULT_LLM_TIMEOUT,
    ):
        self.llm = llm
        self.timeout = timeout
        self.logger = structlog.get_logger().bind(component="step_executor")

    def build_prompt(self, step: PlanStep, request: str) -> str:
        profile = get_profile(step.agent_id)
        return STEP_EXECUTION_PROMPT.format(
            agent_name=profile.name,
            agent_role=profile.role,
            expertise=", ".join(profile.expertise),
            request=request,
            step_description=step.description,
            tool=step.tool,
        )

    async def execute(
        self,
        step: PlanStep,
        request: str,
        intent: IntentAnalysis | None = None,
        on_start: Callable[[PlanStep], None] | None = None,
    ) -> PlanStep:
        """
        Execute a pending step in place.

        Args:
            step: Step in PENDING status
            request: Original request text
            intent: Classification of the request (logged for context)
            on_start: Called once the step is RUNNING, before any model call

        Returns:
            The same step, now COMPLETED or FAILED
        """
        step.start()
        try:
            if on_start is not None:
                on_start(step)
            profile = get_profile(step.agent_id)
            text = await generate_or_none(
                self.llm,
                self.build_prompt(step, request),
                profile.context("step_execution"),
                self.timeout,
                self.logger,
            )
            if text is not None:
                step.complete(text)
            else:
                step.complete(render_step_template(step.tool, profile.expertise), used_fallback=True)
                self.logger.info("step_fallback_used", step_id=step.id, tool=step.tool)
        except Exception as e:
            if step.status == StepStatus.RUNNING:
                step.fail(f"{type(e).__name__}: {e}")
            self.logger.error(
                "step_failed",
                step_id=step.id,
                tool=step.tool,
                agent_id=step.agent_id,
                error_type=type(e).__name__,
                error=str(e)[:200],
            )
            return step

        self.logger.info(
            "step_completed",
            step_id=step.id,
            tool=step.tool,
            category=intent.category if intent else None,
            used_fallback=step.used_fallback,
            duration_ms=step.duration,
        )
        return step
