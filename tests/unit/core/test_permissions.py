"""Tests for PermissionGate and PermissionService."""

import pytest

from boardroom.core.domain.errors import PermissionRequestNotFound
from boardroom.core.domain.models import PermissionCategory, PermissionStatus, Priority
from boardroom.core.domain.permissions import (
    PermissionGate,
    PermissionService,
    categorize_action,
    metadata_amount,
)


class TestPermissionGate:
    @pytest.mark.parametrize(
        "action,expected",
        [
            ("send_email", True),
            ("data_export", True),
            ("external_api_access", True),
            ("web_research", False),
            ("send_message", False),
            ("financial_analysis", False),
            ("something_new", False),
        ],
    )
    def test_static_table(self, action, expected):
        assert PermissionGate().requires_approval(action) is expected

    @pytest.mark.parametrize(
        "amount,expected",
        [
            (5000, True),
            (1000, False),
            (500, False),
            ("2,500", True),
            ("$999.99", False),
            ("nan", True),
            (float("nan"), True),
            (float("inf"), True),
            ("-inf", True),
        ],
    )
    def test_financial_threshold(self, amount, expected):
        gate = PermissionGate(financial_threshold=1000)

        assert gate.requires_approval("financial_transaction", "finance", {"amount": amount}) is expected

    def test_financial_without_amount_follows_table(self):
        assert PermissionGate().requires_approval("financial_transaction", "finance", {}) is True
        assert PermissionGate().requires_approval("financial_transaction", "finance", {"amount": "lots"}) is True

    def test_threshold_is_configurable(self):
        gate = PermissionGate(financial_threshold=10000)

        assert gate.requires_approval("financial_transaction", "finance", {"amount": 5000}) is False

    def test_communications_switch_cannot_ungate_high_risk(self):
        gate = PermissionGate(require_approval_for_communications=False)

        assert gate.requires_approval("send_email") is True
        assert gate.requires_approval("send_sms") is True
        assert gate.requires_approval("make_phone_call") is True
        assert gate.requires_approval("send_message") is False


@pytest.mark.parametrize(
    "action,category",
    [
        ("send_email", PermissionCategory.COMMUNICATION),
        ("budget_change", PermissionCategory.FINANCIAL),
        ("contract_modification", PermissionCategory.LEGAL),
        ("user_data_access", PermissionCategory.DATA_ACCESS),
        ("external_api_access", PermissionCategory.DATA_ACCESS),
        ("strategic_decision", PermissionCategory.STRATEGIC),
    ],
)
def test_categorize_action(action, category):
    assert categorize_action(action) == category


def test_metadata_amount_rejects_non_numbers():
    assert metadata_amount({"amount": True}) is None
    assert metadata_amount({"amount": None}) is None
    assert metadata_amount(None) is None
    assert metadata_amount({"amount": 12}) == 12.0
    assert metadata_amount({"amount": "NaN"}) is None
    assert metadata_amount({"amount": float("inf")}) is None


class TestPermissionService:
    def test_request_starts_pending(self, permission_service):
        request = permission_service.request_permission("finance", "send_email", "Email the board")

        assert request.status == PermissionStatus.PENDING
        assert request.category == PermissionCategory.COMMUNICATION
        assert permission_service.get_request(request.id) is request

    def test_approve_is_terminal_and_idempotent(self, permission_service):
        request = permission_service.request_permission("finance", "send_email", "Email the board")

        assert permission_service.approve(request.id, approved_by="ceo") is True
        assert permission_service.approve(request.id) is False
        assert permission_service.deny(request.id, "too late") is False

        assert request.status == PermissionStatus.APPROVED
        assert request.decided_by == "ceo"
        assert request.decided_at is not None

    def test_deny_records_reason(self, permission_service):
        request = permission_service.request_permission("finance", "send_sms", "Text the team")

        assert permission_service.deny(request.id, "not now") is True
        assert permission_service.approve(request.id) is False

        assert request.status == PermissionStatus.DENIED
        assert request.denied_reason == "not now"

    def test_unknown_request(self, permission_service):
        assert permission_service.approve("perm_missing") is False
        assert permission_service.deny("perm_missing") is False
        assert permission_service.find_request("perm_missing") is None
        with pytest.raises(PermissionRequestNotFound):
            permission_service.get_request("perm_missing")

    def test_decision_notifies_requesting_agent_only(self, permission_service):
        finance_updates, legal_updates = [], []
        permission_service.on_permission_update("finance", finance_updates.append)
        permission_service.on_permission_update("legal", legal_updates.append)
        request = permission_service.request_permission("finance", "send_email", "Email")

        permission_service.approve(request.id)
        permission_service.approve(request.id)

        assert finance_updates == [request]
        assert legal_updates == []

    def test_failing_listener_does_not_block_decision(self, permission_service):
        def broken(_request):
            raise RuntimeError("ui gone")

        permission_service.on_permission_update("finance", broken)
        request = permission_service.request_permission("finance", "send_email", "Email")

        assert permission_service.deny(request.id) is True

    def test_removed_listener_is_not_called(self, permission_service):
        updates = []
        permission_service.on_permission_update("finance", updates.append)
        permission_service.remove_permission_listener("finance")
        request = permission_service.request_permission("finance", "send_email", "Email")

        permission_service.approve(request.id)

        assert updates == []

    def test_routine_actions_are_auto_approved(self, permission_service):
        request = permission_service.request_permission("executive-eva", "report_generation", "Weekly report")

        assert request.status == PermissionStatus.APPROVED
        assert request.auto_approved is True
        assert request.decided_by == "auto"
        assert permission_service.get_pending_requests() == []

    def test_routine_action_over_limit_stays_pending(self, permission_service):
        request = permission_service.request_permission(
            "executive-eva", "report_generation", "Paid report", metadata={"amount": 5000}
        )

        assert request.status == PermissionStatus.PENDING

    def test_auto_approval_can_be_disabled(self):
        service = PermissionService(auto_approve_routine=False)

        request = service.request_permission("operations", "data_backup", "Nightly backup")

        assert request.status == PermissionStatus.PENDING

    def test_pending_ordering(self, permission_service):
        low = permission_service.request_permission("hr", "send_email", "a", priority=Priority.LOW)
        old_critical = permission_service.request_permission("hr", "send_email", "b", priority=Priority.CRITICAL)
        medium = permission_service.request_permission("hr", "send_email", "c", priority=Priority.MEDIUM)
        high = permission_service.request_permission("hr", "send_email", "d", priority=Priority.HIGH)
        new_critical = permission_service.request_permission("hr", "send_email", "e", priority=Priority.CRITICAL)
        decided = permission_service.request_permission("hr", "send_email", "f", priority=Priority.CRITICAL)
        permission_service.approve(decided.id)

        assert permission_service.get_pending_requests() == [new_critical, old_critical, high, medium, low]

    def test_emergency_mode_denies_non_critical(self, permission_service):
        normal = permission_service.request_permission("cto", "system_configuration", "Change config")
        critical = permission_service.request_permission(
            "cto", "system_configuration", "Hotfix", priority=Priority.CRITICAL
        )

        denied = permission_service.enable_emergency_mode("breach detected")

        assert denied == 1
        assert normal.status == PermissionStatus.DENIED
        assert normal.decided_by == "system"
        assert critical.status == PermissionStatus.PENDING
        assert permission_service.emergency_mode is True
        assert permission_service.get_recent_activity(1)[0].type == "denial"
        assert any(e.type == "emergency" for e in permission_service.get_recent_activity())

        permission_service.disable_emergency_mode()
        assert permission_service.emergency_mode is False

    def test_recent_activity_is_newest_first(self, permission_service):
        permission_service.request_permission("hr", "send_email", "first")
        permission_service.request_permission("hr", "send_email", "second")

        activity = permission_service.get_recent_activity(limit=2)

        assert [e.description for e in activity] == ["hr requests send_email: second", "hr requests send_email: first"]
        assert permission_service.get_recent_activity(0) == []

    def test_metrics(self, permission_service):
        a = permission_service.request_permission("finance", "send_email", "a")
        b = permission_service.request_permission("finance", "send_email", "b")
        permission_service.request_permission("legal", "send_email", "c")
        permission_service.request_permission("hr", "status_update", "d")
        permission_service.approve(a.id)
        permission_service.deny(b.id)

        metrics = permission_service.get_metrics()

        assert metrics["total_requests"] == 4
        assert metrics["pending"] == 1
        assert metrics["approved"] == 2
        assert metrics["denied"] == 1
        assert metrics["auto_approved"] == 1
        assert metrics["approval_rate"] == round(2 / 3, 4)
        assert metrics["by_agent"]["finance"] == {"total": 2, "approved": 1, "denied": 1, "approval_rate": 0.5}
        assert permission_service.get_agent_requests("legal")[0].description == "c"
