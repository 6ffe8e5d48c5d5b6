"""
Core Domain Models

Data models shared by the planning pipeline, the thought stream and the
permission-gated action layer. Status fields use string enums so they
serialize directly into API payloads and audit records.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


def new_id(prefix: str) -> str:
    """Return a short unique identifier with a readable prefix."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def _elapsed_ms(start: datetime, end: datetime) -> float:
    return round((end - start).total_seconds() * 1000, 3)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class ThoughtType(str, Enum):
    ANALYSIS = "analysis"
    PLANNING = "planning"
    EXECUTION = "execution"
    DELEGATION = "delegation"
    SYNTHESIS = "synthesis"
    REVIEW = "review"


class ThoughtStatus(str, Enum):
    THINKING = "thinking"
    COMPLETE = "complete"
    FAILED = "failed"


class PlanStatus(str, Enum):
    PLANNING = "planning"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class Complexity(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class DeliverableType(str, Enum):
    REPORT = "report"
    ANALYSIS = "analysis"
    DOCUMENT = "document"
    PLAN = "plan"
    RECOMMENDATION = "recommendation"
    DATA = "data"
    CODE = "code"


class DeliverableFormat(str, Enum):
    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"
    HTML = "html"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return {"low": 1, "medium": 2, "high": 3, "critical": 4}[self.value]


class PermissionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class PermissionCategory(str, Enum):
    COMMUNICATION = "communication"
    FINANCIAL = "financial"
    LEGAL = "legal"
    DATA_ACCESS = "data_access"
    API_INTEGRATION = "api_integration"
    STRATEGIC = "strategic"


class ActionStatus(str, Enum):
    SUCCESS = "success"
    PENDING_APPROVAL = "pending_approval"
    ERROR = "error"


@dataclass
class ThoughtStep:
    """
    One reasoning event in an agent's thought stream.

    A step is created in THINKING status and finished exactly once; after
    that it is immutable.
    """

    type: ThoughtType
    content: str
    id: str = field(default_factory=lambda: new_id("thought"))
    status: ThoughtStatus = ThoughtStatus.THINKING
    created_at: datetime = field(default_factory=datetime.now)
    duration: float | None = None
    result: str | None = None

    def finish(self, result: str, failed: bool = False) -> None:
        """
        Move the step to its terminal status.

        Args:
            result: Human-readable outcome of the stage
            failed: Mark the step FAILED instead of COMPLETE

        Raises:
            ValueError: If the step already left THINKING
        """
        if self.status != ThoughtStatus.THINKING:
            raise ValueError(f"Thought step {self.id} is already {self.status.value}")
        self.status = ThoughtStatus.FAILED if failed else ThoughtStatus.COMPLETE
        self.result = result
        self.duration = _elapsed_ms(self.created_at, datetime.now())

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "content": self.content,
            "status": self.status.value,
            "created_at": _iso(self.created_at),
            "duration": self.duration,
            "result": self.result,
        }


@dataclass
class PlanStep:
    """
    One unit of work in a plan, bound to a tool and an owning agent.

    Transitions are strictly pending -> running -> completed|failed.
    """

    description: str
    tool: str
    agent_id: str
    input: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: new_id("step"))
    status: StepStatus = StepStatus.PENDING
    output: str | None = None
    error: str | None = None
    used_fallback: bool = False
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration: float | None = None

    def start(self) -> None:
        if self.status != StepStatus.PENDING:
            raise ValueError(f"Step {self.id} cannot start from {self.status.value}")
        self.status = StepStatus.RUNNING
        self.started_at = datetime.now()

    def complete(self, output: str, used_fallback: bool = False) -> None:
        self._finish(StepStatus.COMPLETED)
        self.output = output
        self.used_fallback = used_fallback

    def fail(self, error: str) -> None:
        self._finish(StepStatus.FAILED)
        self.error = error

    def _finish(self, status: StepStatus) -> None:
        if self.status != StepStatus.RUNNING:
            raise ValueError(
                f"Step {self.id} cannot move to {status.value} from {self.status.value}"
            )
        self.status = status
        self.completed_at = datetime.now()
        self.duration = _elapsed_ms(self.started_at, self.completed_at)

    @property
    def is_terminal(self) -> bool:
        return self.status in (StepStatus.COMPLETED, StepStatus.FAILED, StepStatus.SKIPPED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "tool": self.tool,
            "agent_id": self.agent_id,
            "status": self.status.value,
            "input": self.input,
            "output": self.output,
            "error": self.error,
            "used_fallback": self.used_fallback,
            "started_at": _iso(self.started_at),
            "completed_at": _iso(self.completed_at),
            "duration": self.duration,
        }


@dataclass
class Deliverable:
    """Artifact synthesized from the completed steps of a plan."""

    type: DeliverableType
    title: str
    content: str
    agent_id: str
    format: DeliverableFormat = DeliverableFormat.MARKDOWN
    id: str = field(default_factory=lambda: new_id("del"))
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "content": self.content,
            "format": self.format.value,
            "created_at": _iso(self.created_at),
            "agent_id": self.agent_id,
        }


@dataclass
class Plan:
    """
    Ordered steps generated for one request.

    The objective is fixed at creation; steps and deliverables mutate in place.
    """

    agent_id: str
    objective: str
    steps: list[PlanStep] = field(default_factory=list)
    id: str = field(default_factory=lambda: new_id("plan"))
    status: PlanStatus = PlanStatus.PLANNING
    created_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime | None = None
    deliverables: list[Deliverable] = field(default_factory=list)
    collaborators: list[str] = field(default_factory=list)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "objective" and "objective" in self.__dict__:
            raise AttributeError("Plan objective is immutable")
        super().__setattr__(name, value)

    @property
    def completed_steps(self) -> list[PlanStep]:
        return [s for s in self.steps if s.status == StepStatus.COMPLETED]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "agent_id": self.agent_id,
            "objective": self.objective,
            "status": self.status.value,
            "steps": [s.to_dict() for s in self.steps],
            "created_at": _iso(self.created_at),
            "completed_at": _iso(self.completed_at),
            "deliverables": [d.to_dict() for d in self.deliverables],
            "collaborators": list(self.collaborators),
        }


@dataclass
class AgentThought:
    """Live reasoning state of one agent. Replaced wholesale on every new request."""

    agent_id: str
    thoughts: list[ThoughtStep] = field(default_factory=list)
    plan: Plan | None = None
    is_thinking: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "thoughts": [t.to_dict() for t in self.thoughts],
            "plan": self.plan.to_dict() if self.plan else None,
            "is_thinking": self.is_thinking,
        }


@dataclass
class IntentAnalysis:
    """Classification of a free-text request."""

    intent: str
    complexity: Complexity
    category: str
    tools_needed: list[str]
    requires_collaboration: bool = False
    delegate_to: list[str] = field(default_factory=list)
    urgency: Urgency = Urgency.MEDIUM
    entities: dict[str, list[str]] = field(default_factory=dict)
    source: str = "rules"

    def __post_init__(self):
        if not self.tools_needed:
            raise ValueError("IntentAnalysis.tools_needed must not be empty")

    def to_dict(self) -> dict[str, Any]:
        return {
            "intent": self.intent,
            "complexity": self.complexity.value,
            "category": self.category,
            "tools_needed": list(self.tools_needed),
            "requires_collaboration": self.requires_collaboration,
            "delegate_to": list(self.delegate_to),
            "urgency": self.urgency.value,
            "entities": self.entities,
            "source": self.source,
        }


@dataclass
class ProcessResult:
    """Outcome of processing one request through the planning pipeline."""

    response: str
    thoughts: list[ThoughtStep] = field(default_factory=list)
    plan: Plan | None = None
    deliverables: list[Deliverable] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "response": self.response,
            "thoughts": [t.to_dict() for t in self.thoughts],
            "plan": self.plan.to_dict() if self.plan else None,
            "deliverables": [d.to_dict() for d in self.deliverables],
        }


@dataclass
class PermissionRequest:
    """
    Approval record for a gated action.

    Terminal once approved or denied. The queued parameters of the blocked
    action live in metadata["params"] so the caller can replay it.
    """

    agent_id: str
    action: str
    description: str
    category: PermissionCategory
    priority: Priority = Priority.MEDIUM
    metadata: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: new_id("perm"))
    status: PermissionStatus = PermissionStatus.PENDING
    created_at: datetime = field(default_factory=datetime.now)
    decided_at: datetime | None = None
    decided_by: str | None = None
    denied_reason: str | None = None
    auto_approved: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.status != PermissionStatus.PENDING

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "agent_id": self.agent_id,
            "action": self.action,
            "description": self.description,
            "category": self.category.value,
            "priority": self.priority.value,
            "status": self.status.value,
            "metadata": self.metadata,
            "created_at": _iso(self.created_at),
            "decided_at": _iso(self.decided_at),
            "decided_by": self.decided_by,
            "denied_reason": self.denied_reason,
            "auto_approved": self.auto_approved,
        }


@dataclass
class ActivityLogEntry:
    """Permission activity record (requests, decisions, emergency switches)."""

    type: str
    description: str
    severity: str = "info"
    agent_id: str | None = None
    request_id: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "description": self.description,
            "severity": self.severity,
            "agent_id": self.agent_id,
            "request_id": self.request_id,
            "timestamp": _iso(self.timestamp),
        }


@dataclass
class ActionResult:
    """
    Uniform outcome of a dispatched action.

    Attributes:
        status: success, pending_approval or error
        action: Dispatcher action name
        agent_id: Agent on whose behalf the action ran
        data: Gateway payload on success
        error: Error description on failure
        permission_request_id: Id of the pending request when gated
        fallback: Queued-for-retry payload on failure
    """

    status: ActionStatus
    action: str
    agent_id: str
    data: Any = None
    error: str | None = None
    permission_request_id: str | None = None
    fallback: dict[str, Any] | None = None

    @property
    def success(self) -> bool:
        return self.status == ActionStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "action": self.action,
            "agent_id": self.agent_id,
            "data": self.data,
            "error": self.error,
            "permission_request_id": self.permission_request_id,
            "fallback": self.fallback,
        }


@dataclass
class MemoryEntry:
    role: str
    content: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content, "timestamp": _iso(self.timestamp)}


@dataclass
class AgentMemory:
    """Bounded conversation log and learnings of one agent."""

    agent_id: str
    conversation: list[MemoryEntry] = field(default_factory=list)
    learnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "conversation": [m.to_dict() for m in self.conversation],
            "learnings": list(self.learnings),
        }
