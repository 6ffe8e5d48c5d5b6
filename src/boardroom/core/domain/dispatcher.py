"""
Action Dispatcher

Single entry point for every externally visible action. Each dispatch:

- asks the permission gate; a gated action becomes a pending PermissionRequest
  (its parameters queued in the request metadata) and the gateway is not
  called;
- otherwise invokes the action gateway; any failure (exception, timeout,
  ``success: False``, malformed response) becomes an error result carrying a
  queued-for-retry fallback payload.

Approval is detached from the original call. Once a request is approved the
caller re-issues it with ``replay(request_id)``; nothing is replayed
automatically.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import structlog

from boardroom.core.domain.agents import resolve_agent_id
from boardroom.core.domain.errors import UnknownAgentError
from boardroom.core.domain.models import (
    ActionResult,
    ActionStatus,
    PermissionStatus,
    Priority,
)
from boardroom.core.domain.permissions import PermissionService, metadata_amount
from boardroom.core.interfaces.gateway import ActionGateway
from boardroom.core.interfaces.store import RecordStore

AUDIT_TABLE = "audit_log"
DEFAULT_GATEWAY_TIMEOUT = 15.0


@dataclass(frozen=True)
class ActionSpec:
    """
    Static description of a dispatchable action.

    Attributes:
        name: Dispatcher action name
        gateway_function: Function name passed to the action gateway
        permission_action: Action name checked against the permission gate
        channel: Delivery channel reported in the retry fallback
        label: Human-readable noun used in descriptions
        priority: Priority of permission requests raised for this action
    """

    name: str
    gateway_function: str
    permission_action: str
    channel: str
    label: str
    priority: Priority = Priority.MEDIUM

    def fallback(self) -> dict[str, Any]:
        return {
            "queued": True,
            "retry": True,
            "channel": self.channel,
            "action": self.name,
            "message": f"{self.label} queued for retry",
        }


ACTIONS: dict[str, ActionSpec] = {
    s.name: s
    for s in (
        ActionSpec("send_message", "send-message", "send_message", "internal", "Message"),
        ActionSpec("send_email", "send-email", "send_email", "email", "Email"),
        ActionSpec("send_sms", "send-sms", "send_sms", "sms", "SMS"),
        ActionSpec("make_phone_call", "make-phone-call", "make_phone_call", "phone", "Phone call", Priority.HIGH),
        ActionSpec("web_research", "web-research", "web_research", "web", "Web research"),
        ActionSpec("update_board", "trello-integration", "external_api_access", "board", "Board update"),
        ActionSpec("update_classroom", "google-classroom", "external_api_access", "classroom", "Classroom update"),
        ActionSpec("run_financial_model", "financial-analysis", "financial_analysis", "finance", "Financial model run"),
        ActionSpec(
            "financial_transaction", "financial-transaction", "financial_transaction",
            "finance", "Financial transaction", Priority.HIGH,
        ),
    )
}


def describe_action(spec: ActionSpec, params: dict[str, Any]) -> str:
    target = (
        params.get("recipient")
        or params.get("phone_number")
        or params.get("to_agent")
        or params.get("query")
        or params.get("symbol")
    )
    amount = metadata_amount(params)
    parts = [spec.label]
    if target:
        parts.append(f"to {target}" if spec.channel in ("email", "sms", "phone", "internal") else f"for {target}")
    if amount is not None:
        parts.append(f"of ${amount:,.2f}")
    return " ".join(parts)


class ActionDispatcher:
    def __init__(
        self,
        permissions: PermissionService,
        gateway: ActionGateway | None = None,
        store: RecordStore | None = None,
        timeout: float = DEFAULT_GATEWAY_TIMEOUT,
    ):
        """
        Initialize the dispatcher.

        Args:
            permissions: Permission service (gate policy and request lifecycle)
            gateway: External action gateway (None degrades every call to queued)
            store: Record store receiving audit records
            timeout: Seconds allowed for one gateway call
        """
        self.permissions = permissions
        self.gateway = gateway
        self.store = store
        self.timeout = timeout
        self.logger = structlog.get_logger().bind(component="action_dispatcher")

    async def dispatch(
        self,
        action: str,
        agent_id: str,
        params: dict[str, Any] | None = None,
        description: str | None = None,
        priority: Priority | None = None,
    ) -> ActionResult:
        """
        Dispatch an action through the permission gate. Never raises.

        Args:
            action: Dispatcher action name (see ACTIONS)
            agent_id: Agent on whose behalf the action runs
            params: Action parameters forwarded to the gateway
            description: Description for a permission request (derived if None)
            priority: Priority for a permission request (action default if None)

        Returns:
            ActionResult with status success, pending_approval or error
        """
        params = dict(params or {})
        spec = ACTIONS.get(action)
        if spec is None:
            self.logger.warning("action_unknown", action=action, agent_id=agent_id)
            return ActionResult(
                status=ActionStatus.ERROR, action=action, agent_id=agent_id, error=f"Unknown action: {action}"
            )
        try:
            agent_id = resolve_agent_id(agent_id).value
        except UnknownAgentError as e:
            return ActionResult(
                status=ActionStatus.ERROR,
                action=action,
                agent_id=str(agent_id),
                error=str(e),
                fallback=spec.fallback(),
            )

        try:
            gated = self.permissions.requires_approval(spec.permission_action, agent_id, params)
            if gated:
                metadata = {"dispatch_action": action, "params": params}
                amount = metadata_amount(params)
                if amount is not None:
                    metadata["amount"] = amount
                request = self.permissions.request_permission(
                    agent_id=agent_id,
                    action=spec.permission_action,
                    description=description or describe_action(spec, params),
                    priority=priority or spec.priority,
                    metadata=metadata,
                )
                if request.status != PermissionStatus.APPROVED:
                    result = ActionResult(
                        status=ActionStatus.PENDING_APPROVAL,
                        action=action,
                        agent_id=agent_id,
                        permission_request_id=request.id,
                        data={"message": f"{spec.label} is waiting for approval", "request_id": request.id},
                    )
                    self.logger.info(
                        "action_pending_approval", action=action, agent_id=agent_id, request_id=request.id
                    )
                    await self._audit(result)
                    return result
        except Exception as e:
            self.logger.error("action_gate_failed", action=action, agent_id=agent_id, error=str(e)[:200])
            result = ActionResult(
                status=ActionStatus.ERROR,
                action=action,
                agent_id=agent_id,
                error=f"{type(e).__name__}: {e}",
                fallback=spec.fallback(),
            )
            await self._audit(result)
            return result

        return await self._execute(spec, agent_id, params)

    async def replay(self, request_id: str) -> ActionResult:
        """
        Re-issue the queued parameters of an approved permission request.

        The permission gate is not consulted again. A request can be replayed
        successfully only once, and only one replay of it runs at a time.

        Args:
            request_id: Id of an approved request created by dispatch()

        Returns:
            ActionResult of the execution, or an error result if the request is
            unknown, not approved or already replayed
        """
        request = self.permissions.find_request(request_id)
        if request is None:
            return ActionResult(
                status=ActionStatus.ERROR, action="replay", agent_id="", error=f"Unknown permission request: {request_id}"
            )
        action = request.metadata.get("dispatch_action", request.action)
        spec = ACTIONS.get(action)
        if spec is None:
            return ActionResult(
                status=ActionStatus.ERROR,
                action=action,
                agent_id=request.agent_id,
                error=f"Request {request_id} does not reference a dispatchable action",
            )
        if request.status != PermissionStatus.APPROVED:
            return ActionResult(
                status=ActionStatus.ERROR,
                action=action,
                agent_id=request.agent_id,
                permission_request_id=request_id,
                error=f"Request {request_id} is {request.status.value}, not approved",
            )
        if request.metadata.get("replayed_at"):
            return ActionResult(
                status=ActionStatus.ERROR,
                action=action,
                agent_id=request.agent_id,
                permission_request_id=request_id,
                error=f"Request {request_id} was already replayed",
            )
        if request.metadata.get("replay_started_at"):
            return ActionResult(
                status=ActionStatus.ERROR,
                action=action,
                agent_id=request.agent_id,
                permission_request_id=request_id,
                error=f"Request {request_id} is already being replayed",
            )

        # Claimed before the first await so a concurrent replay sees it
        request.metadata["replay_started_at"] = datetime.now().isoformat()
        self.logger.info("action_replay", action=action, request_id=request_id, agent_id=request.agent_id)
        try:
            result = await self._execute(spec, request.agent_id, dict(request.metadata.get("params", {})))
        finally:
            request.metadata.pop("replay_started_at", None)
        result.permission_request_id = request_id
        if result.success:
            request.metadata["replayed_at"] = datetime.now().isoformat()
        return result

    async def send_message(self, from_agent: str, to_agent: str, content: str, **extra: Any) -> ActionResult:
        return await self.dispatch("send_message", from_agent, {"to_agent": to_agent, "content": content, **extra})

    async def send_email(self, agent_id: str, recipient: str, subject: str, body: str) -> ActionResult:
        return await self.dispatch(
            "send_email", agent_id, {"recipient": recipient, "subject": subject, "body": body}
        )

    async def send_sms(self, agent_id: str, phone_number: str, message: str, **extra: Any) -> ActionResult:
        return await self.dispatch("send_sms", agent_id, {"phone_number": phone_number, "message": message, **extra})

    async def make_phone_call(self, agent_id: str, phone_number: str, purpose: str, message: str) -> ActionResult:
        return await self.dispatch(
            "make_phone_call",
            agent_id,
            {"phone_number": phone_number, "purpose": purpose, "message": message},
        )

    async def web_research(
        self, agent_id: str, query: str, purpose: str | None = None, search_type: str = "general"
    ) -> ActionResult:
        return await self.dispatch(
            "web_research", agent_id, {"query": query, "purpose": purpose, "search_type": search_type}
        )

    async def update_board(self, agent_id: str, board_action: str, **fields: Any) -> ActionResult:
        return await self.dispatch("update_board", agent_id, {"action": board_action, **fields})

    async def update_classroom(self, agent_id: str, classroom_action: str, **fields: Any) -> ActionResult:
        return await self.dispatch("update_classroom", agent_id, {"action": classroom_action, **fields})

    async def run_financial_model(
        self, agent_id: str, analysis_type: str, symbol: str | None = None
    ) -> ActionResult:
        return await self.dispatch(
            "run_financial_model", agent_id, {"analysis_type": analysis_type, "symbol": symbol}
        )

    async def financial_transaction(
        self, agent_id: str, amount: float, description: str, **fields: Any
    ) -> ActionResult:
        params = {"amount": amount, "description": description, **fields}
        return await self.dispatch(
            "financial_transaction",
            agent_id,
            params,
            description=f"{describe_action(ACTIONS['financial_transaction'], params)}: {description}",
        )

    async def _execute(self, spec: ActionSpec, agent_id: str, params: dict[str, Any]) -> ActionResult:
        error = None
        data = None
        if self.gateway is None:
            error = "No action gateway configured"
        else:
            try:
                response = await asyncio.wait_for(
                    self.gateway.invoke(spec.gateway_function, {"agent_id": agent_id, **params}),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError:
                error = f"Gateway call timed out after {self.timeout}s"
            except Exception as e:
                error = f"{type(e).__name__}: {e}"
            else:
                if not isinstance(response, dict) or "success" not in response:
                    error = "Malformed gateway response"
                elif response["success"] is True:
                    data = response.get("data")
                else:
                    error = str(response.get("error") or "Gateway reported failure")

        if error is None:
            result = ActionResult(status=ActionStatus.SUCCESS, action=spec.name, agent_id=agent_id, data=data)
            self.logger.info("action_succeeded", action=spec.name, agent_id=agent_id)
        else:
            result = ActionResult(
                status=ActionStatus.ERROR,
                action=spec.name,
                agent_id=agent_id,
                error=error,
                fallback=spec.fallback(),
            )
            self.logger.warning("action_failed", action=spec.name, agent_id=agent_id, error=error[:200])
        await self._audit(result)
        return result

    async def _audit(self, result: ActionResult) -> None:
        if self.store is None:
            return
        record = {
            "event": "action_dispatched",
            "timestamp": datetime.now().isoformat(),
            **{k: v for k, v in result.to_dict().items() if k != "data"},
        }
        try:
            await self.store.insert(AUDIT_TABLE, record)
        except Exception as e:
            self.logger.warning("audit_write_failed", action=result.action, error=str(e)[:200])
