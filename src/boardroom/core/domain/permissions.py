"""
Permission Gate and Permission Service

PermissionGate is the pure policy: given an action name, the requesting agent
and the action metadata it answers whether the action must be approved
before it runs.

PermissionService owns the lifecycle of PermissionRequest records:
creation (with optional auto-approval of routine actions), approval and
denial (terminal and idempotent), per-agent decision callbacks, an activity
log, emergency mode and simple approval metrics.
"""

import math
from collections import deque
from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog

from boardroom.core.domain.errors import PermissionRequestNotFound
from boardroom.core.domain.models import (
    ActivityLogEntry,
    PermissionCategory,
    PermissionRequest,
    PermissionStatus,
    Priority,
)

DEFAULT_FINANCIAL_THRESHOLD = 1000.0

HIGH_RISK_ACTIONS = frozenset(
    {
        "send_email",
        "make_phone_call",
        "send_sms",
        "financial_transaction",
        "legal_document_modification",
        "external_api_access",
        "data_export",
        "system_configuration",
        "user_data_access",
        "contract_modification",
        "budget_change",
        "strategic_decision",
    }
)
COMMUNICATION_ACTIONS = frozenset({"send_email", "make_phone_call", "send_sms"})
ROUTINE_ACTIONS = ("status_update", "data_backup", "routine_maintenance", "report_generation")

# First matching rule wins; anything else is strategic.
CATEGORY_RULES: tuple[tuple[PermissionCategory, tuple[str, ...]], ...] = (
    (PermissionCategory.COMMUNICATION, ("email", "call", "sms")),
    (PermissionCategory.FINANCIAL, ("budget", "financial", "payment")),
    (PermissionCategory.LEGAL, ("legal", "contract", "document")),
    (PermissionCategory.DATA_ACCESS, ("data", "database", "access")),
    (PermissionCategory.API_INTEGRATION, ("api", "integration", "external")),
)

PermissionListener = Callable[[PermissionRequest], None]


def categorize_action(action: str) -> PermissionCategory:
    lowered = action.lower()
    for category, markers in CATEGORY_RULES:
        if any(m in lowered for m in markers):
            return category
    return PermissionCategory.STRATEGIC


def metadata_amount(metadata: dict[str, Any] | None) -> float | None:
    """Finite numeric 'amount' from action metadata, or None when absent or not a number."""
    if not metadata:
        return None
    amount = metadata.get("amount")
    if isinstance(amount, bool):
        return None
    if isinstance(amount, (int, float)):
        value = float(amount)
    elif isinstance(amount, str):
        try:
            value = float(amount.replace(",", "").replace("$", "").strip())
        except ValueError:
            return None
    else:
        return None
    # NaN and infinity never compare usefully against the threshold
    return value if math.isfinite(value) else None


class PermissionGate:
    def __init__(
        self,
        financial_threshold: float = DEFAULT_FINANCIAL_THRESHOLD,
        require_approval_for_communications: bool = True,
    ):
        self.financial_threshold = financial_threshold
        self.require_approval_for_communications = require_approval_for_communications

    def requires_approval(
        self, action: str, agent_id: str | None = None, metadata: dict[str, Any] | None = None
    ) -> bool:
        """
        Decide whether an action must be approved before it runs.

        A financial_transaction carrying a numeric amount is decided by
        ``amount > financial_threshold`` alone. The communications switch can
        only add approval for communication actions; the static table still
        gates them when it is off.

        Args:
            action: Permission action name
            agent_id: Requesting agent (part of the contract, unused by the policy)
            metadata: Action metadata (amount, recipient, ...)

        Returns:
            True if the action needs approval
        """
        if action == "financial_transaction":
            amount = metadata_amount(metadata)
            if amount is not None:
                return amount > self.financial_threshold
        if self.require_approval_for_communications and action in COMMUNICATION_ACTIONS:
            return True
        return action in HIGH_RISK_ACTIONS


class PermissionService:
    MAX_ACTIVITY_ENTRIES = 500

    def __init__(self, gate: PermissionGate | None = None, auto_approve_routine: bool = True):
        self.gate = gate or PermissionGate()
        self.auto_approve_routine = auto_approve_routine
        self._requests: dict[str, PermissionRequest] = {}
        self._listeners: dict[str, PermissionListener] = {}
        self._activity: deque[ActivityLogEntry] = deque(maxlen=self.MAX_ACTIVITY_ENTRIES)
        self.emergency_mode = False
        self.logger = structlog.get_logger().bind(component="permission_service")

    def requires_approval(
        self, action: str, agent_id: str | None = None, metadata: dict[str, Any] | None = None
    ) -> bool:
        return self.gate.requires_approval(action, agent_id, metadata)

    def request_permission(
        self,
        agent_id: str,
        action: str,
        description: str,
        priority: Priority = Priority.MEDIUM,
        metadata: dict[str, Any] | None = None,
    ) -> PermissionRequest:
        """
        Create a permission request.

        Routine actions within the financial limit are approved immediately
        when auto-approval is enabled; everything else starts pending.

        Args:
            agent_id: Requesting agent
            action: Permission action name
            description: Human-readable summary of what will happen
            priority: Urgency of the decision
            metadata: Action metadata, including queued parameters under 'params'

        Returns:
            The new PermissionRequest
        """
        request = PermissionRequest(
            agent_id=agent_id,
            action=action,
            description=description,
            category=categorize_action(action),
            priority=Priority(priority),
            metadata=dict(metadata or {}),
        )
        self._requests[request.id] = request

        if self._auto_approvable(action, request.metadata):
            request.status = PermissionStatus.APPROVED
            request.auto_approved = True
            request.decided_at = datetime.now()
            request.decided_by = "auto"
            self._log_activity("approval", f"Auto-approved routine action: {action}", "info", request)
            self.logger.info("permission_auto_approved", request_id=request.id, action=action, agent_id=agent_id)
            return request

        self._log_activity("request", f"{agent_id} requests {action}: {description}", "info", request)
        if self.emergency_mode and request.priority != Priority.CRITICAL:
            self._log_activity("emergency", f"Request {request.id} raised during emergency mode", "critical", request)
        self.logger.info(
            "permission_request_created",
            request_id=request.id,
            action=action,
            agent_id=agent_id,
            priority=request.priority.value,
            category=request.category.value,
        )
        return request

    def approve(self, request_id: str, approved_by: str = "executive") -> bool:
        """
        Approve a pending request and notify the requesting agent.

        Returns:
            True if the request moved to approved, False if it was unknown or
            already terminal
        """
        request = self._requests.get(request_id)
        if request is None or request.is_terminal:
            return False
        request.status = PermissionStatus.APPROVED
        request.decided_by = approved_by
        request.decided_at = datetime.now()
        self._log_activity("approval", f"Approved {request.action} for {request.agent_id}", "info", request)
        self.logger.info("permission_approved", request_id=request_id, approved_by=approved_by)
        self._notify(request)
        return True

    def deny(self, request_id: str, reason: str = "", denied_by: str = "executive") -> bool:
        """
        Deny a pending request and notify the requesting agent.

        Returns:
            True if the request moved to denied, False if it was unknown or
            already terminal
        """
        request = self._requests.get(request_id)
        if request is None or request.is_terminal:
            return False
        request.status = PermissionStatus.DENIED
        request.decided_by = denied_by
        request.decided_at = datetime.now()
        request.denied_reason = reason or None
        self._log_activity(
            "denial", f"Denied {request.action} for {request.agent_id}: {reason}", "warning", request
        )
        self.logger.info("permission_denied", request_id=request_id, denied_by=denied_by, reason=reason)
        self._notify(request)
        return True

    def on_permission_update(self, agent_id: str, listener: PermissionListener) -> None:
        """Register the decision callback of an agent, replacing any previous one."""
        self._listeners[agent_id] = listener

    def remove_permission_listener(self, agent_id: str) -> None:
        self._listeners.pop(agent_id, None)

    def get_request(self, request_id: str) -> PermissionRequest:
        request = self._requests.get(request_id)
        if request is None:
            raise PermissionRequestNotFound(request_id)
        return request

    def find_request(self, request_id: str) -> PermissionRequest | None:
        return self._requests.get(request_id)

    def get_pending_requests(self) -> list[PermissionRequest]:
        """Pending requests, highest priority first, newest first within a priority."""
        pending = [r for r in self._requests.values() if r.status == PermissionStatus.PENDING][::-1]
        pending.sort(key=lambda r: r.created_at, reverse=True)
        pending.sort(key=lambda r: r.priority.rank, reverse=True)
        return pending

    def get_agent_requests(self, agent_id: str) -> list[PermissionRequest]:
        return [r for r in self._requests.values() if r.agent_id == agent_id]

    def get_recent_activity(self, limit: int = 20) -> list[ActivityLogEntry]:
        if limit <= 0:
            return []
        return list(self._activity)[-limit:][::-1]

    def enable_emergency_mode(self, reason: str) -> int:
        """
        Enter emergency mode and deny every pending non-critical request.

        Returns:
            Number of requests denied
        """
        self.emergency_mode = True
        self._log_activity("emergency", f"Emergency mode activated: {reason}", "critical")
        self.logger.warning("emergency_mode_enabled", reason=reason)
        denied = 0
        for request in self.get_pending_requests():
            if request.priority != Priority.CRITICAL:
                if self.deny(request.id, reason=f"Emergency mode: {reason}", denied_by="system"):
                    denied += 1
        return denied

    def disable_emergency_mode(self) -> None:
        self.emergency_mode = False
        self._log_activity("emergency", "Emergency mode deactivated", "info")
        self.logger.info("emergency_mode_disabled")

    def get_metrics(self) -> dict[str, Any]:
        requests = list(self._requests.values())
        approved = sum(1 for r in requests if r.status == PermissionStatus.APPROVED)
        denied = sum(1 for r in requests if r.status == PermissionStatus.DENIED)
        per_agent: dict[str, dict[str, Any]] = {}
        for r in requests:
            stats = per_agent.setdefault(r.agent_id, {"total": 0, "approved": 0, "denied": 0})
            stats["total"] += 1
            if r.status == PermissionStatus.APPROVED:
                stats["approved"] += 1
            elif r.status == PermissionStatus.DENIED:
                stats["denied"] += 1
        for stats in per_agent.values():
            stats["approval_rate"] = _rate(stats["approved"], stats["approved"] + stats["denied"])
        return {
            "total_requests": len(requests),
            "pending": len(requests) - approved - denied,
            "approved": approved,
            "denied": denied,
            "auto_approved": sum(1 for r in requests if r.auto_approved),
            "approval_rate": _rate(approved, approved + denied),
            "emergency_mode": self.emergency_mode,
            "by_agent": per_agent,
        }

    def _auto_approvable(self, action: str, metadata: dict[str, Any]) -> bool:
        if not self.auto_approve_routine:
            return False
        amount = metadata_amount(metadata)
        if amount is not None and amount > self.gate.financial_threshold:
            return False
        lowered = action.lower()
        return any(routine in lowered for routine in ROUTINE_ACTIONS)

    def _notify(self, request: PermissionRequest) -> None:
        listener = self._listeners.get(request.agent_id)
        if listener is None:
            return
        try:
            listener(request)
        except Exception as e:
            self.logger.warning(
                "permission_listener_failed",
                agent_id=request.agent_id,
                request_id=request.id,
                error=str(e)[:200],
            )

    def _log_activity(
        self, type: str, description: str, severity: str, request: PermissionRequest | None = None
    ) -> None:
        self._activity.append(
            ActivityLogEntry(
                type=type,
                description=description,
                severity=severity,
                agent_id=request.agent_id if request else None,
                request_id=request.id if request else None,
            )
        )


def _rate(part: int, whole: int) -> float:
    return round(part / whole, 4) if whole else 0.0
