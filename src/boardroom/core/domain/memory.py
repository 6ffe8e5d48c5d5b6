"""
Conversation Memory

Per-agent bounded log of exchanged messages plus short learnings extracted
from user messages. Both sequences keep only the most recent N entries;
eviction is oldest-first.
"""

import structlog

from boardroom.core.domain.models import AgentMemory, MemoryEntry

PREFERENCE_MARKERS = ("prefer", "like")
PRIORITY_MARKERS = ("important", "priority")


class ConversationMemory:
    DEFAULT_CONVERSATION_LIMIT = 30
    DEFAULT_LEARNINGS_LIMIT = 15

    def __init__(
        self,
        conversation_limit: int = DEFAULT_CONVERSATION_LIMIT,
        learnings_limit: int = DEFAULT_LEARNINGS_LIMIT,
    ):
        """
        Initialize the memory store.

        Args:
            conversation_limit: Maximum messages kept per agent
            learnings_limit: Maximum learnings kept per agent
        """
        if conversation_limit < 1 or learnings_limit < 1:
            raise ValueError("Memory limits must be positive")
        self.conversation_limit = conversation_limit
        self.learnings_limit = learnings_limit
        self._memories: dict[str, AgentMemory] = {}
        self.logger = structlog.get_logger().bind(component="conversation_memory")

    def get(self, agent_id: str) -> AgentMemory:
        memory = self._memories.get(agent_id)
        if memory is None:
            memory = AgentMemory(agent_id=agent_id)
            self._memories[agent_id] = memory
        return memory

    def record(self, agent_id: str, role: str, content: str) -> MemoryEntry:
        """Append a message and truncate the log to the configured bound."""
        memory = self.get(agent_id)
        entry = MemoryEntry(role=role, content=content)
        memory.conversation.append(entry)
        overflow = len(memory.conversation) - self.conversation_limit
        if overflow > 0:
            del memory.conversation[:overflow]
            self.logger.debug("memory_truncated", agent_id=agent_id, evicted=overflow)
        return entry

    def add_learning(self, agent_id: str, learning: str) -> None:
        memory = self.get(agent_id)
        memory.learnings.append(learning)
        overflow = len(memory.learnings) - self.learnings_limit
        if overflow > 0:
            del memory.learnings[:overflow]

    def extract_learnings(self, agent_id: str, user_message: str) -> list[str]:
        """
        Record preference and priority statements found in a user message.

        Args:
            agent_id: Agent that received the message
            user_message: Raw user text

        Returns:
            The learnings that were added (possibly empty)
        """
        lowered = user_message.lower()
        added = []
        if any(marker in lowered for marker in PREFERENCE_MARKERS):
            added.append(f"User preference: {user_message}")
        if any(marker in lowered for marker in PRIORITY_MARKERS):
            added.append(f"User priority: {user_message}")
        for learning in added:
            self.add_learning(agent_id, learning)
        return added

    def recent(self, agent_id: str, n: int = 10) -> list[MemoryEntry]:
        if n <= 0:
            return []
        return list(self.get(agent_id).conversation[-n:])

    def clear(self, agent_id: str) -> None:
        self._memories.pop(agent_id, None)
