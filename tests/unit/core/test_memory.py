"""Tests for ConversationMemory."""

import pytest

from boardroom.core.domain.memory import ConversationMemory


class TestConversationMemory:
    def test_record_keeps_most_recent_entries(self):
        memory = ConversationMemory(conversation_limit=3)

        for i in range(5):
            memory.record("finance", "user", f"message {i}")

        contents = [e.content for e in memory.get("finance").conversation]
        assert contents == ["message 2", "message 3", "message 4"]

    def test_agents_are_isolated(self):
        memory = ConversationMemory()
        memory.record("finance", "user", "hello")

        assert memory.get("legal").conversation == []

    def test_extract_learnings(self):
        memory = ConversationMemory()

        added = memory.extract_learnings("finance", "I prefer short reports; cash flow is important")

        assert added == [
            "User preference: I prefer short reports; cash flow is important",
            "User priority: I prefer short reports; cash flow is important",
        ]
        assert memory.get("finance").learnings == added

    def test_extract_learnings_ignores_plain_messages(self):
        memory = ConversationMemory()

        assert memory.extract_learnings("finance", "Summarize Q3") == []

    def test_learnings_are_bounded(self):
        memory = ConversationMemory(learnings_limit=2)

        for i in range(4):
            memory.add_learning("hr", f"learning {i}")

        assert memory.get("hr").learnings == ["learning 2", "learning 3"]

    def test_recent(self):
        memory = ConversationMemory()
        for i in range(4):
            memory.record("cto", "user", str(i))

        assert [e.content for e in memory.recent("cto", 2)] == ["2", "3"]
        assert memory.recent("cto", 0) == []

    def test_clear(self):
        memory = ConversationMemory()
        memory.record("cto", "user", "x")

        memory.clear("cto")

        assert memory.get("cto").conversation == []

    @pytest.mark.parametrize("limits", [(0, 5), (5, 0)])
    def test_invalid_limits(self, limits):
        with pytest.raises(ValueError):
            ConversationMemory(*limits)
