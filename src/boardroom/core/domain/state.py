"""
Agent State Store

Explicitly scoped holder for per-agent live state: the current AgentThought
of every agent and every plan created so far. One store is injected into the
thought stream and the orchestrator; separate stores never share state.
"""

from boardroom.core.domain.models import AgentThought, Plan


class AgentStateStore:
    """In-process repository of agent thoughts and plans."""

    def __init__(self) -> None:
        self._thoughts: dict[str, AgentThought] = {}
        self._plans: dict[str, Plan] = {}

    def replace_thought(self, agent_id: str) -> AgentThought:
        """Install a fresh AgentThought for the agent, discarding the previous one."""
        thought = AgentThought(agent_id=agent_id, thoughts=[], is_thinking=True)
        self._thoughts[agent_id] = thought
        return thought

    def get_thought(self, agent_id: str) -> AgentThought | None:
        return self._thoughts.get(agent_id)

    def is_current(self, thought: AgentThought) -> bool:
        return self._thoughts.get(thought.agent_id) is thought

    def all_thoughts(self) -> list[AgentThought]:
        return list(self._thoughts.values())

    def save_plan(self, plan: Plan) -> None:
        self._plans[plan.id] = plan

    def get_plan(self, plan_id: str) -> Plan | None:
        return self._plans.get(plan_id)

    def list_plans(self, agent_id: str | None = None) -> list[Plan]:
        plans = list(self._plans.values())
        if agent_id is not None:
            plans = [p for p in plans if p.agent_id == agent_id]
        return plans
