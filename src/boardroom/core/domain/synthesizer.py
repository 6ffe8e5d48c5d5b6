"""
Deliverable Synthesizer

Compiles the outputs of a plan's completed steps into one deliverable. With
no completed step there is no deliverable. The language model is asked to
merge the outputs; if it cannot, the raw concatenation is used verbatim.
"""

import structlog

from boardroom.core.domain.agents import get_profile
from boardroom.core.domain.generation import DEFAULT_LLM_TIMEOUT, generate_or_none
from boardroom.core.domain.models import (
    Deliverable,
    DeliverableFormat,
    DeliverableType,
    IntentAnalysis,
    Plan,
    PlanStep,
)
from boardroom.core.interfaces.llm import LanguageModelClient
from boardroom.core.prompts.pipeline_prompts import DELIVERABLE_SYNTHESIS_PROMPT

SECTION_SEPARATOR = "\n\n---\n\n"
MAX_PROMPT_OUTPUT_CHARS = 3000
MAX_TITLE_CHARS = 50

DELIVERABLE_TYPES: dict[str, DeliverableType] = {
    "analysis": DeliverableType.ANALYSIS,
    "planning": DeliverableType.PLAN,
    "creation": DeliverableType.DOCUMENT,
    "research": DeliverableType.REPORT,
    "optimization": DeliverableType.RECOMMENDATION,
    "financial": DeliverableType.ANALYSIS,
    "communication": DeliverableType.DOCUMENT,
    "technical": DeliverableType.CODE,
}


def infer_deliverable_type(category: str) -> DeliverableType:
    return DELIVERABLE_TYPES.get(category, DeliverableType.REPORT)


def concatenate_outputs(steps: list[PlanStep]) -> str:
    return SECTION_SEPARATOR.join(s.output for s in steps if s.output)


class DeliverableSynthesizer:
    def __init__(
        self,
        llm: LanguageModelClient | None = None,
        timeout: float = DEFAULT_LLM_TIMEOUT,
    ):
        self.llm = llm
        self.timeout = timeout
        self.logger = structlog.get_logger().bind(component="deliverable_synthesizer")

    async def synthesize(
        self, plan: Plan, request: str, intent: IntentAnalysis
    ) -> list[Deliverable]:
        """
        Build the deliverables of a plan.

        Args:
            plan: Plan whose steps have run
            request: Original request text
            intent: Classification of the request (drives title and type)

        Returns:
            Empty list when no step completed, otherwise exactly one deliverable
        """
        completed = plan.completed_steps
        if not completed:
            self.logger.info("deliverables_skipped", plan_id=plan.id, reason="no_completed_steps")
            return []

        compiled = concatenate_outputs(completed)
        content = await generate_or_none(
            self.llm,
            DELIVERABLE_SYNTHESIS_PROMPT.format(
                request=request, outputs=compiled[:MAX_PROMPT_OUTPUT_CHARS]
            ),
            get_profile(plan.agent_id).context("deliverable_synthesis"),
            self.timeout,
            self.logger,
        )
        used_fallback = content is None
        if used_fallback:
            content = compiled

        deliverable = Deliverable(
            type=infer_deliverable_type(intent.category),
            title=intent.intent or request[:MAX_TITLE_CHARS],
            content=content,
            format=DeliverableFormat.MARKDOWN,
            agent_id=plan.agent_id,
        )
        self.logger.info(
            "deliverable_created",
            plan_id=plan.id,
            deliverable_id=deliverable.id,
            type=deliverable.type.value,
            source_steps=len(completed),
            used_fallback=used_fallback,
        )
        return [deliverable]
