"""Tests for StepExecutor and the step template library."""

import pytest

from boardroom.core.domain.executor import StepExecutor
from boardroom.core.domain.models import PlanStep, StepStatus
from boardroom.core.domain.templates import (
    STEP_TEMPLATES,
    match_template_key,
    render_step_template,
)


def make_step(tool="financial_modeling", agent_id="finance"):
    return PlanStep(description=f"Execute {tool}", tool=tool, agent_id=agent_id)


class TestStepExecutor:
    @pytest.mark.asyncio
    async def test_model_output_completes_step(self, llm_factory):
        llm = llm_factory(default="Projected revenue grows 12%.")
        step = make_step()

        await StepExecutor(llm).execute(step, "Forecast next year")

        assert step.status == StepStatus.COMPLETED
        assert step.output == "Projected revenue grows 12%."
        assert step.used_fallback is False
        assert step.duration == round((step.completed_at - step.started_at).total_seconds() * 1000, 3)
        assert llm.calls[0][1]["stage"] == "step_execution"

    @pytest.mark.asyncio
    async def test_model_failure_uses_template(self, failing_llm):
        step = make_step()

        await StepExecutor(failing_llm).execute(step, "Forecast next year")

        assert step.status == StepStatus.COMPLETED
        assert step.output == STEP_TEMPLATES["financial_modeling"]
        assert step.used_fallback is True
        assert step.error is None

    @pytest.mark.asyncio
    async def test_timeout_uses_template(self, llm_factory):
        step = make_step(tool="budget_analysis")

        await StepExecutor(llm_factory(delay=1.0), timeout=0.01).execute(step, "Check the budget")

        assert step.status == StepStatus.COMPLETED
        assert step.used_fallback is True
        assert "Budget analysis - Complete" in step.output
        assert "financial planning" in step.output

    @pytest.mark.asyncio
    async def test_empty_output_uses_template(self, llm_factory):
        step = make_step(tool="synthesis")

        await StepExecutor(llm_factory(default="")).execute(step, "Wrap up")

        assert step.output == STEP_TEMPLATES["synthesis"]
        assert step.used_fallback is True

    @pytest.mark.asyncio
    async def test_delegation_step_uses_delegate_profile(self, fake_llm):
        step = make_step(tool="agent_collaboration", agent_id="legal")

        await StepExecutor(fake_llm).execute(step, "Review the contract terms")

        prompt, context = fake_llm.calls[0]
        assert context["name"] == "Lex Legal"
        assert "Lex Legal" in prompt
        assert "Review the contract terms" in prompt

    @pytest.mark.asyncio
    async def test_unexpected_error_fails_step(self, fake_llm):
        step = make_step(agent_id="ghost")

        result = await StepExecutor(fake_llm).execute(step, "Anything")

        assert result is step
        assert step.status == StepStatus.FAILED
        assert "UnknownAgentError" in step.error
        assert step.duration is not None

    @pytest.mark.asyncio
    async def test_on_start_sees_running_step(self, fake_llm):
        seen = []
        step = make_step()

        await StepExecutor(fake_llm).execute(step, "x", on_start=lambda s: seen.append(s.status))

        assert seen == [StepStatus.RUNNING]

    def test_prompt_contents(self):
        prompt = StepExecutor().build_prompt(make_step(), "Forecast next year")

        assert "Felix Finance" in prompt
        assert "Financial Management Advisor" in prompt
        assert "ROI analysis" in prompt
        assert "Execute financial_modeling" in prompt
        assert "Forecast next year" in prompt


class TestTemplates:
    @pytest.mark.parametrize(
        "tool,key",
        [
            ("synthesis", "synthesis"),
            ("campaign", "campaign_planning"),
            ("deep_research_and_analyze_v2", "research_and_analyze"),
            ("budget_analysis", None),
        ],
    )
    def test_match_in_either_direction(self, tool, key):
        assert match_template_key(tool) == key

    def test_generic_template_without_expertise(self):
        output = render_step_template("workflow_design", [])

        assert output.startswith("## Workflow design - Complete")
        assert "domain expertise" in output
