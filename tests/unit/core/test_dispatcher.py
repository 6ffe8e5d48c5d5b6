"""Tests for ActionDispatcher."""

import asyncio

import pytest

from boardroom.core.domain.dispatcher import ACTIONS, AUDIT_TABLE, ActionDispatcher, describe_action
from boardroom.core.domain.models import ActionStatus, PermissionStatus, Priority
from boardroom.core.interfaces.gateway import ActionGatewayError
from boardroom.infrastructure.gateways.queued_gateway import QueuedActionGateway


class TestGatedActions:
    @pytest.mark.asyncio
    async def test_gated_action_never_reaches_gateway(self, dispatcher, gateway, permission_service):
        result = await dispatcher.send_email("finance", "cfo@example.com", "Q3", "Numbers attached")

        assert result.status == ActionStatus.PENDING_APPROVAL
        assert gateway.calls == []
        request = permission_service.get_request(result.permission_request_id)
        assert request.status == PermissionStatus.PENDING
        assert request.action == "send_email"
        assert request.metadata["dispatch_action"] == "send_email"
        assert request.metadata["params"]["recipient"] == "cfo@example.com"
        assert result.data["request_id"] == request.id

    @pytest.mark.asyncio
    async def test_large_transaction_is_gated(self, dispatcher, gateway, permission_service):
        result = await dispatcher.financial_transaction("finance", 5000, "Vendor payment")

        assert result.status == ActionStatus.PENDING_APPROVAL
        assert gateway.calls == []
        request = permission_service.get_request(result.permission_request_id)
        assert request.priority == Priority.HIGH
        assert request.metadata["amount"] == 5000.0
        assert request.description == "Financial transaction of $5,000.00: Vendor payment"

    @pytest.mark.asyncio
    async def test_string_amount_transaction(self, dispatcher, gateway, permission_service):
        result = await dispatcher.financial_transaction("finance", "5000", "Vendor payment")

        assert result.status == ActionStatus.PENDING_APPROVAL
        assert gateway.calls == []
        request = permission_service.get_request(result.permission_request_id)
        assert request.description == "Financial transaction of $5,000.00: Vendor payment"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["NaN", float("nan"), float("inf")])
    async def test_non_finite_amount_is_gated(self, dispatcher, gateway, amount):
        result = await dispatcher.dispatch("financial_transaction", "finance", {"amount": amount})

        assert result.status == ActionStatus.PENDING_APPROVAL
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_small_transaction_runs(self, dispatcher, gateway):
        result = await dispatcher.financial_transaction("finance", 500, "Team lunch")

        assert result.status == ActionStatus.SUCCESS
        assert gateway.calls == [
            ("financial-transaction", {"agent_id": "finance", "amount": 500, "description": "Team lunch"})
        ]

    @pytest.mark.asyncio
    async def test_board_updates_need_api_access(self, dispatcher, gateway, permission_service):
        result = await dispatcher.update_board("operations", "create_card", title="Kickoff")

        assert result.status == ActionStatus.PENDING_APPROVAL
        assert permission_service.get_request(result.permission_request_id).action == "external_api_access"

    @pytest.mark.asyncio
    async def test_explicit_priority_and_description(self, dispatcher, permission_service):
        result = await dispatcher.dispatch(
            "send_sms", "hr", {"phone_number": "5551234567"}, description="Shift reminder", priority=Priority.LOW
        )

        request = permission_service.get_request(result.permission_request_id)
        assert request.priority == Priority.LOW
        assert request.description == "Shift reminder"

    @pytest.mark.asyncio
    async def test_approval_does_not_execute(self, dispatcher, gateway, permission_service):
        result = await dispatcher.make_phone_call("customer", "5551234567", "follow-up", "Hi")

        permission_service.approve(result.permission_request_id)

        assert gateway.calls == []


class TestUngatedActions:
    @pytest.mark.asyncio
    async def test_success_returns_gateway_data(self, dispatcher, gateway):
        result = await dispatcher.web_research("intelligence", "competitor pricing")

        assert result.status == ActionStatus.SUCCESS
        assert result.data == {"delivered": True}
        assert result.fallback is None
        name, params = gateway.calls[0]
        assert name == "web-research"
        assert params["query"] == "competitor pricing"
        assert params["agent_id"] == "intelligence"

    @pytest.mark.asyncio
    async def test_internal_message(self, dispatcher, gateway):
        result = await dispatcher.send_message("finance", "legal", "Please review")

        assert result.success
        assert gateway.calls[0][0] == "send-message"

    @pytest.mark.asyncio
    async def test_financial_model(self, dispatcher, gateway):
        result = await dispatcher.run_financial_model("finance", "valuation", symbol="ACME")

        assert result.success
        assert gateway.calls[0] == (
            "financial-analysis",
            {"agent_id": "finance", "analysis_type": "valuation", "symbol": "ACME"},
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response,error",
        [
            ({"success": False, "error": "quota"}, "quota"),
            ({"success": False}, "Gateway reported failure"),
            (["not", "a", "dict"], "Malformed gateway response"),
            ({"data": 1}, "Malformed gateway response"),
        ],
    )
    async def test_gateway_failures_become_errors(self, permission_service, gateway_factory, response, error):
        dispatcher = ActionDispatcher(permission_service, gateway=gateway_factory({"web-research": response}))

        result = await dispatcher.web_research("data", "q")

        assert result.status == ActionStatus.ERROR
        assert result.error == error
        assert result.fallback == {
            "queued": True,
            "retry": True,
            "channel": "web",
            "action": "web_research",
            "message": "Web research queued for retry",
        }

    @pytest.mark.asyncio
    async def test_gateway_exception_is_contained(self, permission_service, gateway_factory):
        dispatcher = ActionDispatcher(
            permission_service, gateway=gateway_factory(error=ActionGatewayError("connection reset"))
        )

        result = await dispatcher.send_message("finance", "legal", "hi")

        assert result.status == ActionStatus.ERROR
        assert "connection reset" in result.error
        assert result.fallback["queued"] is True

    @pytest.mark.asyncio
    async def test_gateway_timeout(self, permission_service, gateway_factory):
        dispatcher = ActionDispatcher(permission_service, gateway=gateway_factory(delay=1.0), timeout=0.01)

        result = await dispatcher.web_research("data", "q")

        assert result.status == ActionStatus.ERROR
        assert "timed out" in result.error

    @pytest.mark.asyncio
    async def test_without_gateway(self, permission_service):
        result = await ActionDispatcher(permission_service).web_research("data", "q")

        assert result.status == ActionStatus.ERROR
        assert result.fallback is not None

    @pytest.mark.asyncio
    async def test_queued_gateway_stub(self, permission_service):
        stub = QueuedActionGateway()
        dispatcher = ActionDispatcher(permission_service, gateway=stub)

        result = await dispatcher.web_research("data", "q")

        assert result.status == ActionStatus.ERROR
        assert result.fallback["channel"] == "web"
        assert stub.calls[0][0] == "web-research"


class TestValidation:
    @pytest.mark.asyncio
    async def test_unknown_action(self, dispatcher, gateway):
        result = await dispatcher.dispatch("launch_rocket", "finance")

        assert result.status == ActionStatus.ERROR
        assert result.fallback is None
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_unknown_agent(self, dispatcher, gateway, permission_service):
        result = await dispatcher.send_email("ghost", "a@example.com", "s", "b")

        assert result.status == ActionStatus.ERROR
        assert "ghost" in result.error
        assert gateway.calls == []
        assert permission_service.get_metrics()["total_requests"] == 0


class TestReplay:
    @pytest.mark.asyncio
    async def test_replay_after_approval(self, dispatcher, gateway, permission_service):
        pending = await dispatcher.send_email("finance", "cfo@example.com", "Q3", "Numbers")
        permission_service.approve(pending.permission_request_id)

        result = await dispatcher.replay(pending.permission_request_id)

        assert result.status == ActionStatus.SUCCESS
        assert result.permission_request_id == pending.permission_request_id
        assert gateway.calls == [
            (
                "send-email",
                {"agent_id": "finance", "recipient": "cfo@example.com", "subject": "Q3", "body": "Numbers"},
            )
        ]

    @pytest.mark.asyncio
    async def test_replay_only_once(self, dispatcher, gateway, permission_service):
        pending = await dispatcher.send_email("finance", "cfo@example.com", "Q3", "Numbers")
        permission_service.approve(pending.permission_request_id)
        await dispatcher.replay(pending.permission_request_id)

        again = await dispatcher.replay(pending.permission_request_id)

        assert again.status == ActionStatus.ERROR
        assert "already replayed" in again.error
        assert len(gateway.calls) == 1

    @pytest.mark.asyncio
    async def test_failed_replay_can_be_retried(self, permission_service, gateway_factory):
        gateway = gateway_factory({"send-email": {"success": False, "error": "smtp down"}})
        dispatcher = ActionDispatcher(permission_service, gateway=gateway)
        pending = await dispatcher.send_email("finance", "cfo@example.com", "Q3", "Numbers")
        permission_service.approve(pending.permission_request_id)

        first = await dispatcher.replay(pending.permission_request_id)
        gateway.responses = {}
        second = await dispatcher.replay(pending.permission_request_id)

        assert first.status == ActionStatus.ERROR
        assert second.status == ActionStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_concurrent_replays_execute_once(self, permission_service, gateway_factory):
        gateway = gateway_factory(delay=0.05)
        dispatcher = ActionDispatcher(permission_service, gateway=gateway)
        pending = await dispatcher.financial_transaction("finance", 5000, "Vendor payment")
        permission_service.approve(pending.permission_request_id)

        first, second = await asyncio.gather(
            dispatcher.replay(pending.permission_request_id),
            dispatcher.replay(pending.permission_request_id),
        )

        assert first.status == ActionStatus.SUCCESS
        assert second.status == ActionStatus.ERROR
        assert "already being replayed" in second.error
        assert len(gateway.calls) == 1
        request = permission_service.get_request(pending.permission_request_id)
        assert "replay_started_at" not in request.metadata
        assert request.metadata["replayed_at"]

    @pytest.mark.asyncio
    async def test_replay_requires_approval(self, dispatcher, gateway, permission_service):
        pending = await dispatcher.send_email("finance", "cfo@example.com", "Q3", "Numbers")

        still_pending = await dispatcher.replay(pending.permission_request_id)
        permission_service.deny(pending.permission_request_id, "no")
        denied = await dispatcher.replay(pending.permission_request_id)

        assert still_pending.status == ActionStatus.ERROR
        assert "pending" in still_pending.error
        assert denied.status == ActionStatus.ERROR
        assert "denied" in denied.error
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_replay_unknown_request(self, dispatcher):
        result = await dispatcher.replay("perm_missing")

        assert result.status == ActionStatus.ERROR

    @pytest.mark.asyncio
    async def test_replay_of_request_without_dispatch(self, dispatcher, permission_service):
        request = permission_service.request_permission("finance", "budget_change", "Raise budget")
        permission_service.approve(request.id)

        result = await dispatcher.replay(request.id)

        assert result.status == ActionStatus.ERROR
        assert "dispatchable" in result.error


class TestAudit:
    @pytest.mark.asyncio
    async def test_every_dispatch_is_audited(self, dispatcher, record_store):
        await dispatcher.send_email("finance", "cfo@example.com", "Q3", "Numbers")
        await dispatcher.web_research("data", "q")

        records = await record_store.select(AUDIT_TABLE, {"event": "action_dispatched"})

        assert sorted(r["status"] for r in records) == ["pending_approval", "success"]
        assert all("data" not in r for r in records)


def test_describe_action():
    assert describe_action(ACTIONS["send_email"], {"recipient": "a@example.com"}) == "Email to a@example.com"
    assert describe_action(ACTIONS["web_research"], {"query": "pricing"}) == "Web research for pricing"
    assert (
        describe_action(ACTIONS["financial_transaction"], {"amount": 1500})
        == "Financial transaction of $1,500.00"
    )
