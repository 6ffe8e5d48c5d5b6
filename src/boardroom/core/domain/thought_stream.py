"""
Thought Stream

Per-agent broadcast of reasoning-state events. Observers subscribe with a
callback receiving the agent's live AgentThought.

Delivery contract:
- Callbacks run synchronously, in subscription order, before the mutating
  call returns, so an observer never sees state older than the last mutation.
- Every state change is delivered at least once to every current subscriber.
- There is no replay buffer; late subscribers only see later changes.
- A failing subscriber is logged and skipped; it never affects others.
- Once an agent's AgentThought is replaced by a newer request, mutations of
  the old one are applied but no longer published.
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Any

import structlog

from boardroom.core.domain.models import AgentThought, Plan, ThoughtStep, ThoughtType
from boardroom.core.domain.state import AgentStateStore

ThoughtListener = Callable[[AgentThought], None]


class ThoughtStream:
    def __init__(self, state: AgentStateStore | None = None):
        self.state = state or AgentStateStore()
        self._listeners: list[ThoughtListener] = []
        self.logger = structlog.get_logger().bind(component="thought_stream")

    def subscribe(self, listener: ThoughtListener) -> Callable[[], None]:
        """
        Register a listener.

        Args:
            listener: Called with the AgentThought after every state change

        Returns:
            Idempotent function removing the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def begin(self, agent_id: str) -> AgentThought:
        """Replace the agent's AgentThought with a fresh one and announce it."""
        thought = self.state.replace_thought(agent_id)
        self._publish(thought)
        return thought

    def add_step(self, thought: AgentThought, type: ThoughtType, content: str) -> ThoughtStep:
        step = ThoughtStep(type=type, content=content)
        thought.thoughts.append(step)
        thought.is_thinking = True
        self._publish(thought)
        return step

    def finish_step(
        self, thought: AgentThought, step: ThoughtStep, result: str, failed: bool = False
    ) -> None:
        step.finish(result, failed=failed)
        self._publish(thought)

    def attach_plan(self, thought: AgentThought, plan: Plan) -> None:
        thought.plan = plan
        self._publish(thought)

    def touch(self, thought: AgentThought) -> None:
        """Re-publish after an in-place mutation (e.g. a plan step changed status)."""
        self._publish(thought)

    def end(self, thought: AgentThought) -> None:
        thought.is_thinking = False
        self._publish(thought)

    def get_active_thought(self, agent_id: str) -> AgentThought | None:
        return self.state.get_thought(agent_id)

    def get_all_active_thoughts(self) -> list[AgentThought]:
        return [t for t in self.state.all_thoughts() if t.is_thinking]

    async def stream(
        self, agent_id: str | None = None, until_idle: bool = True
    ) -> AsyncIterator[dict[str, Any]]:
        """
        Async iterator of AgentThought snapshots for transport to remote observers.

        Args:
            agent_id: Only yield snapshots of this agent (all agents if None)
            until_idle: Stop after the filtered agent reports is_thinking False

        Yields:
            Serialized AgentThought snapshots taken at publish time
        """
        queue: asyncio.Queue = asyncio.Queue()

        def _enqueue(thought: AgentThought) -> None:
            if agent_id is None or thought.agent_id == agent_id:
                queue.put_nowait(thought.to_dict())

        unsubscribe = self.subscribe(_enqueue)
        try:
            while True:
                snapshot = await queue.get()
                yield snapshot
                if until_idle and agent_id is not None and not snapshot["is_thinking"]:
                    break
        finally:
            unsubscribe()

    def _publish(self, thought: AgentThought) -> None:
        if not self.state.is_current(thought):
            return
        for listener in tuple(self._listeners):
            try:
                listener(thought)
            except Exception as e:
                self.logger.warning(
                    "thought_listener_failed",
                    agent_id=thought.agent_id,
                    error_type=type(e).__name__,
                    error=str(e)[:200],
                )
