"""
Application Layer - Engine Factory

Wires the core domain components with infrastructure adapters according to
BoardroomSettings:

- language model: LiteLLMClient when a config file is available, else none
  (every stage then uses its deterministic fallback)
- action gateway: HttpActionGateway when a base URL is configured, else the
  QueuedActionGateway stub
- record store: FileRecordStore when an audit path is configured, else
  InMemoryRecordStore
"""

from dataclasses import dataclass
from pathlib import Path

import structlog

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
from boardroom.core.interfaces.gateway import ActionGateway
from boardroom.core.interfaces.llm import LanguageModelClient
from boardroom.core.interfaces.store import RecordStore
from boardroom.infrastructure.gateways.http_gateway import HttpActionGateway
from boardroom.infrastructure.gateways.queued_gateway import QueuedActionGateway
from boardroom.infrastructure.llm.litellm_client import LiteLLMClient
from boardroom.infrastructure.persistence.file_store import FileRecordStore
from boardroom.infrastructure.persistence.memory_store import InMemoryRecordStore

_UNSET = object()


@dataclass
class Boardroom:
    """Fully wired engine: one orchestrator and one dispatcher sharing state."""

    settings: BoardroomSettings
    orchestrator: PlanOrchestrator
    dispatcher: ActionDispatcher
    permissions: PermissionService
    thought_stream: ThoughtStream
    memory: ConversationMemory
    store: RecordStore
    llm: LanguageModelClient | None
    gateway: ActionGateway


class BoardroomFactory:
    def __init__(self, settings: BoardroomSettings | None = None):
        self.settings = settings or BoardroomSettings()
        self.logger = structlog.get_logger().bind(component="boardroom_factory")

    def create_llm(self) -> LanguageModelClient | None:
        path = self.settings.llm_config_path
        if not path or not Path(path).exists():
            self.logger.warning("llm_not_configured", config_path=path)
            return None
        return LiteLLMClient(config_path=path)

    def create_gateway(self) -> ActionGateway:
        if not self.settings.gateway_base_url:
            return QueuedActionGateway()
        return HttpActionGateway(
            base_url=self.settings.gateway_base_url,
            api_key=self.settings.gateway_api_key,
            timeout=self.settings.gateway_timeout_seconds,
        )

    def create_store(self) -> RecordStore:
        if self.settings.audit_store_path:
            return FileRecordStore(self.settings.audit_store_path)
        return InMemoryRecordStore()

    def create(
        self,
        llm: "LanguageModelClient | None | object" = _UNSET,
        gateway: ActionGateway | None = None,
        store: RecordStore | None = None,
    ) -> Boardroom:
        """
        Build a fully wired engine.

        Args:
            llm: Language model client override (pass None to disable the model)
            gateway: Action gateway override
            store: Record store override

        Returns:
            Boardroom with fresh, isolated state
        """
        s = self.settings
        if llm is _UNSET:
            llm = self.create_llm()
        gateway = gateway or self.create_gateway()
        store = store or self.create_store()
        timeout = s.llm_timeout_seconds

        thought_stream = ThoughtStream(AgentStateStore())
        memory = ConversationMemory(s.conversation_limit, s.learnings_limit)
        orchestrator = PlanOrchestrator(
            thought_stream=thought_stream,
            analyzer=IntentAnalyzer(llm, timeout=timeout),
            planner=PlanBuilder(),
            executor=StepExecutor(llm, timeout=timeout),
            synthesizer=DeliverableSynthesizer(llm, timeout=timeout),
            llm=llm,
            memory=memory,
            store=store,
            timeout=timeout,
        )
        permissions = PermissionService(
            gate=PermissionGate(
                financial_threshold=s.financial_approval_threshold,
                require_approval_for_communications=s.require_approval_for_communications,
            ),
            auto_approve_routine=s.auto_approve_routine,
        )
        dispatcher = ActionDispatcher(
            permissions=permissions,
            gateway=gateway,
            store=store,
            timeout=s.gateway_timeout_seconds,
        )
        self.logger.info(
            "boardroom_created",
            llm_enabled=llm is not None,
            gateway=type(gateway).__name__,
            store=type(store).__name__,
        )
        return Boardroom(
            settings=s,
            orchestrator=orchestrator,
            dispatcher=dispatcher,
            permissions=permissions,
            thought_stream=thought_stream,
            memory=memory,
            store=store,
            llm=llm,
            gateway=gateway,
        )
