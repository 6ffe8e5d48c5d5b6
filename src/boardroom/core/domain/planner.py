"""
Plan Builder

Turns an IntentAnalysis into a Plan with a fixed step order:

1. one research_and_analyze step
2. one step per needed tool, in order
3. one agent_collaboration step per delegate, owned by the delegate
4. exactly one trailing synthesis step

The trailing synthesis step is always present, so consumers can rely on
``plan.steps[-1].tool == SYNTHESIS_TOOL``.
"""

import structlog

from boardroom.core.domain.models import IntentAnalysis, Plan, PlanStatus, PlanStep

RESEARCH_TOOL = "research_and_analyze"
COLLABORATION_TOOL = "agent_collaboration"
SYNTHESIS_TOOL = "synthesis"


def humanize_tool(tool: str) -> str:
    return tool.replace("_", " ")


class PlanBuilder:
    def __init__(self) -> None:
        self.logger = structlog.get_logger().bind(component="plan_builder")

    def build(self, agent_id: str, request: str, intent: IntentAnalysis) -> Plan:
        """
        Create the plan for one request.

        Args:
            agent_id: Owning agent
            request: Original request text (becomes the plan objective)
            intent: Classification of the request

        Returns:
            Plan in PLANNING status with all steps pending
        """
        steps = [
            PlanStep(
                description=f"Research and analyze: {intent.intent}",
                tool=RESEARCH_TOOL,
                agent_id=agent_id,
                input={"request": request, "category": intent.category},
            )
        ]
        for tool in intent.tools_needed:
            steps.append(
                PlanStep(
                    description=f"Execute {humanize_tool(tool)}",
                    tool=tool,
                    agent_id=agent_id,
                    input={"request": request, "tool": tool},
                )
            )
        for delegate in intent.delegate_to:
            steps.append(
                PlanStep(
                    description=f"Collaborate with {delegate} for specialized input",
                    tool=COLLABORATION_TOOL,
                    agent_id=delegate,
                    input={"request": request, "collaborator": delegate},
                )
            )
        steps.append(
            PlanStep(
                description="Synthesize findings and create deliverable",
                tool=SYNTHESIS_TOOL,
                agent_id=agent_id,
                input={"request": request},
            )
        )

        plan = Plan(
            agent_id=agent_id,
            objective=request,
            steps=steps,
            status=PlanStatus.PLANNING,
            collaborators=list(intent.delegate_to),
        )
        self.logger.info(
            "plan.created",
            plan_id=plan.id,
            agent_id=agent_id,
            step_count=len(steps),
            collaborators=plan.collaborators,
        )
        return plan
