"""Shared fakes and fixtures for the boardroom test suite."""

import asyncio
from typing import Any

import pytest

from boardroom.application.factory import BoardroomFactory
from boardroom.application.settings import BoardroomSettings
from boardroom.core.domain.dispatcher import ActionDispatcher
from boardroom.core.domain.executor import StepExecutor
from boardroom.core.domain.intent import IntentAnalyzer
from boardroom.core.domain.memory import ConversationMemory
from boardroom.core.domain.orchestrator import PlanOrchestrator
from boardroom.core.domain.permissions import PermissionGate, PermissionService
from boardroom.core.domain.planner import PlanBuilder
from boardroom.core.domain.state import AgentStateStore
from boardroom.core.domain.synthesizer import DeliverableSynthesizer
from boardroom.core.domain.thought_stream import ThoughtStream
from boardroom.core.interfaces.llm import LanguageModelError
from boardroom.infrastructure.persistence.memory_store import InMemoryRecordStore

# Fifteen words, category keyword "analyze", no finance tool named.
SIMPLE_ANALYZE_REQUEST = (
    "Please analyze the quarterly numbers and tell me what stands out for our small shop"
)


class FakeLanguageModel:
    """
    Scripted language model.

    Responses are picked by pipeline stage first, then from the queue, then
    the default. An ``error`` is raised on every call; ``delay`` sleeps first.
    """

    def __init__(
        self,
        default: Any = "Generated output",
        responses: list[Any] | None = None,
        stage_responses: dict[str, Any] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.default = default
        self.responses = list(responses or [])
        self.stage_responses = dict(stage_responses or {})
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def generate(self, prompt: str, agent_context: dict[str, Any]) -> str:
        self.calls.append((prompt, dict(agent_context)))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        stage = agent_context.get("stage")
        if stage in self.stage_responses:
            return self.stage_responses[stage]
        if self.responses:
            return self.responses.pop(0)
        return self.default

    def prompts_for(self, stage: str) -> list[str]:
        return [p for p, ctx in self.calls if ctx.get("stage") == stage]


class RecordingGateway:
    """Action gateway that records calls and answers from a script."""

    def __init__(
        self,
        responses: dict[str, Any] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.responses = dict(responses or {})
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def invoke(self, action_name: str, params: dict[str, Any]) -> Any:
        self.calls.append((action_name, dict(params)))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.responses.get(action_name, {"success": True, "data": {"delivered": True}})


@pytest.fixture
def fake_llm():
    return FakeLanguageModel()


@pytest.fixture
def failing_llm():
    return FakeLanguageModel(error=LanguageModelError("quota exceeded"))


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def record_store():
    return InMemoryRecordStore()


@pytest.fixture
def thought_stream():
    return ThoughtStream(AgentStateStore())


def build_orchestrator(llm, thought_stream=None, store=None, memory=None, timeout=5.0):
    stream = thought_stream or ThoughtStream(AgentStateStore())
    return PlanOrchestrator(
        thought_stream=stream,
        analyzer=IntentAnalyzer(llm, timeout=timeout),
        planner=PlanBuilder(),
        executor=StepExecutor(llm, timeout=timeout),
        synthesizer=DeliverableSynthesizer(llm, timeout=timeout),
        llm=llm,
        memory=memory or ConversationMemory(),
        store=store,
        timeout=timeout,
    )


@pytest.fixture
def permission_service():
    return PermissionService(PermissionGate(financial_threshold=1000))


@pytest.fixture
def dispatcher(permission_service, gateway, record_store):
    return ActionDispatcher(permission_service, gateway=gateway, store=record_store, timeout=1.0)


@pytest.fixture
def offline_settings():
    return BoardroomSettings(llm_config_path=None, gateway_base_url=None, audit_store_path=None)


@pytest.fixture
def offline_boardroom(offline_settings):
    return BoardroomFactory(offline_settings).create(llm=None)


@pytest.fixture
def simple_request():
    return SIMPLE_ANALYZE_REQUEST


@pytest.fixture
def llm_factory():
    """Build scripted language models inside a test."""
    return FakeLanguageModel


@pytest.fixture
def gateway_factory():
    return RecordingGateway


@pytest.fixture
def orchestrator_factory():
    return build_orchestrator
