"""Tests for PlanBuilder."""

import pytest

from boardroom.core.domain.agents import list_profiles
from boardroom.core.domain.intent import IntentAnalyzer
from boardroom.core.domain.models import Complexity, IntentAnalysis, PlanStatus, StepStatus
from boardroom.core.domain.planner import (
    COLLABORATION_TOOL,
    RESEARCH_TOOL,
    SYNTHESIS_TOOL,
    PlanBuilder,
)


@pytest.fixture
def planner():
    return PlanBuilder()


class TestPlanBuilder:
    def test_simple_request_yields_three_steps(self, planner, simple_request):
        intent = IntentAnalyzer().analyze_with_rules("finance", simple_request)

        plan = planner.build("finance", simple_request, intent)

        assert [s.tool for s in plan.steps] == [RESEARCH_TOOL, "financial_modeling", SYNTHESIS_TOOL]
        assert plan.steps[1].description == "Execute financial modeling"
        assert plan.status == PlanStatus.PLANNING
        assert plan.objective == simple_request
        assert plan.collaborators == []
        assert all(s.status == StepStatus.PENDING for s in plan.steps)

    def test_step_order_with_delegates(self, planner):
        intent = IntentAnalysis(
            intent="Review spending",
            complexity=Complexity.COMPLEX,
            category="financial",
            tools_needed=["budget_analysis", "forecasting"],
            requires_collaboration=True,
            delegate_to=["data", "legal"],
        )

        plan = planner.build("finance", "Review spending with the team", intent)

        assert [(s.tool, s.agent_id) for s in plan.steps] == [
            (RESEARCH_TOOL, "finance"),
            ("budget_analysis", "finance"),
            ("forecasting", "finance"),
            (COLLABORATION_TOOL, "data"),
            (COLLABORATION_TOOL, "legal"),
            (SYNTHESIS_TOOL, "finance"),
        ]
        assert plan.steps[0].description == "Research and analyze: Review spending"
        assert plan.steps[3].description == "Collaborate with data for specialized input"
        assert plan.collaborators == ["data", "legal"]

    @pytest.mark.parametrize("profile", list_profiles(), ids=lambda p: p.id)
    @pytest.mark.parametrize(
        "request_text",
        ["Hello", "coordinate a review with the team", "analyze " + " ".join(["detail"] * 60)],
    )
    def test_synthesis_is_always_last(self, planner, profile, request_text):
        intent = IntentAnalyzer().analyze_with_rules(profile.id, request_text)

        plan = planner.build(profile.id, request_text, intent)

        assert plan.steps[-1].tool == SYNTHESIS_TOOL
        assert sum(1 for s in plan.steps if s.tool == SYNTHESIS_TOOL) == 1
        assert len(plan.steps) == 2 + len(intent.tools_needed) + len(intent.delegate_to)
        assert len({s.id for s in plan.steps}) == len(plan.steps)
