"""
Plan Orchestrator

Top-level driver of the planning pipeline for one request:

    start -> analyze -> plan -> (execute step)* -> synthesize -> respond -> done

Every stage opens a ThoughtStep in ``thinking`` status and closes it as
``complete`` or ``failed`` through the thought stream. Steps run strictly one
after another. The orchestrator never lets an exception escape; callers
always receive a ProcessResult with a natural-language response.
"""

from datetime import datetime
from typing import Any

import structlog

from boardroom.core.domain.agents import AgentProfile, get_profile
from boardroom.core.domain.errors import UnknownAgentError
from boardroom.core.domain.executor import StepExecutor
from boardroom.core.domain.generation import DEFAULT_LLM_TIMEOUT, generate_or_none
from boardroom.core.domain.intent import IntentAnalyzer
from boardroom.core.domain.memory import ConversationMemory
from boardroom.core.domain.models import (
    AgentThought,
    Deliverable,
    Plan,
    PlanStatus,
    ProcessResult,
    StepStatus,
    ThoughtStatus,
    ThoughtStep,
    ThoughtType,
)
from boardroom.core.domain.planner import COLLABORATION_TOOL, PlanBuilder
from boardroom.core.domain.synthesizer import DeliverableSynthesizer
from boardroom.core.domain.thought_stream import ThoughtStream
from boardroom.core.interfaces.llm import LanguageModelClient
from boardroom.core.interfaces.store import RecordStore
from boardroom.core.prompts.pipeline_prompts import FINAL_RESPONSE_PROMPT

AUDIT_TABLE = "audit_log"

UNKNOWN_AGENT_RESPONSE = (
    "I couldn't route this request because no agent named '{agent_id}' is on the team."
)
PIPELINE_FAILURE_RESPONSE = (
    "I ran into a problem while working on your request and couldn't finish it. "
    "Please try again in a moment."
)


def templated_response(plan: Plan, deliverables: list[Deliverable]) -> str:
    """Deterministic summary used when the language model cannot write one."""
    completed = len(plan.completed_steps)
    if plan.collaborators:
        collaboration = f"- Collaborated with: {', '.join(plan.collaborators)}"
    else:
        collaboration = "- Worked independently on this task"
    findings = "\n".join(f"- {d.title}: {d.content[:150]}..." for d in deliverables)
    return (
        "I've completed the work on your request. Here's what I accomplished:\n\n"
        "**Execution Summary:**\n"
        f"- Completed {completed} of {len(plan.steps)} planned steps\n"
        f"- Created {len(deliverables)} deliverable(s)\n"
        f"{collaboration}\n\n"
        "**Key Findings:**\n"
        f"{findings or '- No findings were produced'}\n\n"
        "The full deliverable is available in the task details."
    )


class PlanOrchestrator:
    """
    Sequences intent analysis, planning, step execution, synthesis and the
    final response for requests addressed to registered agents.

    Dependencies are injected so several isolated orchestrators can run side
    by side (each with its own state store inside the thought stream).
    """

    def __init__(
        self,
        thought_stream: ThoughtStream,
        analyzer: IntentAnalyzer,
        planner: PlanBuilder,
        executor: StepExecutor,
        synthesizer: DeliverableSynthesizer,
        llm: LanguageModelClient | None = None,
        memory: ConversationMemory | None = None,
        store: RecordStore | None = None,
        timeout: float = DEFAULT_LLM_TIMEOUT,
    ):
        """
        Initialize the orchestrator.

        Args:
            thought_stream: Broadcast channel (also owns the agent state store)
            analyzer: Intent analyzer
            planner: Plan builder
            executor: Step executor
            synthesizer: Deliverable synthesizer
            llm: Client used for the final response (None forces the template)
            memory: Conversation memory updated on every request
            store: Record store receiving audit records
            timeout: Seconds allowed for the final response call
        """
        self.thought_stream = thought_stream
        self.state = thought_stream.state
        self.analyzer = analyzer
        self.planner = planner
        self.executor = executor
        self.synthesizer = synthesizer
        self.llm = llm
        self.memory = memory
        self.store = store
        self.timeout = timeout
        self.logger = structlog.get_logger().bind(component="plan_orchestrator")

    async def process_request(
        self, agent_id: str, request: str, context: dict[str, Any] | None = None
    ) -> ProcessResult:
        """
        Run the full pipeline for one request.

        A new request replaces the agent's visible AgentThought; an earlier
        in-flight plan for the same agent keeps running but is no longer
        published.

        Args:
            agent_id: Registered agent receiving the request
            request: Free-text request
            context: Optional caller metadata, copied into the audit record

        Returns:
            ProcessResult with response text, thought steps, plan and deliverables
        """
        try:
            profile = get_profile(agent_id)
        except UnknownAgentError:
            self.logger.warning("request.rejected", agent_id=agent_id, reason="unknown_agent")
            return ProcessResult(response=UNKNOWN_AGENT_RESPONSE.format(agent_id=agent_id))

        agent_id = profile.id
        self.logger.info("request.processing.started", agent_id=agent_id, request=request[:100])
        self._remember(agent_id, "user", request, extract=True)

        thought = self.thought_stream.begin(agent_id)
        thoughts: list[ThoughtStep] = []
        plan: Plan | None = None
        current: ThoughtStep | None = None
        deliverables: list[Deliverable] = []

        try:
            current = self._open(thought, thoughts, ThoughtType.ANALYSIS, f'Analyzing request: "{request[:100]}"')
            intent = await self.analyzer.analyze(agent_id, request)
            self._close(
                thought,
                current,
                f"Intent: {intent.intent}, Complexity: {intent.complexity.value}, "
                f"Tools needed: {', '.join(intent.tools_needed)}",
            )

            current = self._open(
                thought,
                thoughts,
                ThoughtType.PLANNING,
                f"Creating execution plan with {len(intent.tools_needed)} tool step(s)...",
            )
            plan = self.planner.build(agent_id, request, intent)
            self.state.save_plan(plan)
            self._close(
                thought,
                current,
                f"Plan created: {len(plan.steps)} steps, "
                f"collaborators: {', '.join(plan.collaborators) or 'none'}",
            )
            plan.status = PlanStatus.EXECUTING
            self.thought_stream.attach_plan(thought, plan)

            for step in plan.steps:
                kind = ThoughtType.DELEGATION if step.tool == COLLABORATION_TOOL else ThoughtType.EXECUTION
                current = self._open(thought, thoughts, kind, f"Executing: {step.description}")
                await self.executor.execute(
                    step, request, intent, on_start=lambda _s: self.thought_stream.touch(thought)
                )
                if step.status == StepStatus.FAILED:
                    self._close(thought, current, f"Failed: {step.error}", failed=True)
                else:
                    self._close(thought, current, (step.output or "")[:200])

            current = self._open(thought, thoughts, ThoughtType.SYNTHESIS, "Synthesizing results into deliverables...")
            deliverables = await self.synthesizer.synthesize(plan, request, intent)
            plan.deliverables.extend(deliverables)
            self._close(thought, current, f"Created {len(deliverables)} deliverable(s)")

            current = self._open(thought, thoughts, ThoughtType.REVIEW, "Preparing final response...")
            response = await self._respond(profile, request, plan, deliverables)
            self._close(thought, current, response[:200])
            current = None

            plan.status = PlanStatus.COMPLETED
            plan.completed_at = datetime.now()
            self.thought_stream.end(thought)
        except Exception as e:
            self.logger.error(
                "request.processing.failed",
                agent_id=agent_id,
                plan_id=plan.id if plan else None,
                error_type=type(e).__name__,
                error=str(e)[:200],
            )
            if current is not None and current.status == ThoughtStatus.THINKING:
                self._close(thought, current, f"Failed: {type(e).__name__}", failed=True)
            if plan is not None:
                plan.status = PlanStatus.FAILED
                plan.completed_at = datetime.now()
            self.thought_stream.end(thought)
            response = PIPELINE_FAILURE_RESPONSE

        self._remember(agent_id, "assistant", response)
        await self._audit(agent_id, request, plan, deliverables, context)
        self.logger.info(
            "request.processing.finished",
            agent_id=agent_id,
            plan_id=plan.id if plan else None,
            status=plan.status.value if plan else None,
            deliverables=len(deliverables),
        )
        return ProcessResult(response=response, thoughts=thoughts, plan=plan, deliverables=deliverables)

    def get_plan(self, plan_id: str) -> Plan | None:
        return self.state.get_plan(plan_id)

    def get_plans(self, agent_id: str | None = None) -> list[Plan]:
        return self.state.list_plans(agent_id)

    def get_active_thought(self, agent_id: str) -> AgentThought | None:
        return self.thought_stream.get_active_thought(agent_id)

    def get_all_active_thoughts(self) -> list[AgentThought]:
        return self.thought_stream.get_all_active_thoughts()

    def _open(
        self, thought: AgentThought, thoughts: list[ThoughtStep], kind: ThoughtType, content: str
    ) -> ThoughtStep:
        step = self.thought_stream.add_step(thought, kind, content)
        thoughts.append(step)
        return step

    def _close(self, thought: AgentThought, step: ThoughtStep, result: str, failed: bool = False) -> None:
        self.thought_stream.finish_step(thought, step, result, failed=failed)

    async def _respond(
        self, profile: AgentProfile, request: str, plan: Plan, deliverables: list[Deliverable]
    ) -> str:
        prompt = FINAL_RESPONSE_PROMPT.format(
            request=request,
            completed_steps=len(plan.completed_steps),
            total_steps=len(plan.steps),
            deliverable_count=len(deliverables),
            collaborators=", ".join(plan.collaborators) or "worked independently",
            key_results="\n".join(d.content[:500] for d in deliverables),
        )
        text = await generate_or_none(
            self.llm, prompt, profile.context("final_response"), self.timeout, self.logger
        )
        return text if text is not None else templated_response(plan, deliverables)

    def _remember(self, agent_id: str, role: str, content: str, extract: bool = False) -> None:
        if self.memory is None:
            return
        self.memory.record(agent_id, role, content)
        if extract:
            self.memory.extract_learnings(agent_id, content)

    async def _audit(
        self,
        agent_id: str,
        request: str,
        plan: Plan | None,
        deliverables: list[Deliverable],
        context: dict[str, Any] | None,
    ) -> None:
        if self.store is None:
            return
        record = {
            "event": "plan_finished",
            "agent_id": agent_id,
            "request": request[:500],
            "plan_id": plan.id if plan else None,
            "status": plan.status.value if plan else None,
            "completed_steps": len(plan.completed_steps) if plan else 0,
            "total_steps": len(plan.steps) if plan else 0,
            "deliverable_ids": [d.id for d in deliverables],
            "context": context or {},
            "timestamp": datetime.now().isoformat(),
        }
        try:
            await self.store.insert(AUDIT_TABLE, record)
        except Exception as e:
            self.logger.warning("audit_write_failed", agent_id=agent_id, error=str(e)[:200])
