"""Stand-in gateway used when no action backend is configured."""

from typing import Any

import structlog


class QueuedActionGateway:
    """Accepts nothing; every call fails so the dispatcher returns its queued fallback."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.logger = structlog.get_logger().bind(component="queued_action_gateway")

    async def invoke(self, action_name: str, params: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((action_name, dict(params)))
        self.logger.info("gateway_not_configured", action=action_name)
        return {"success": False, "error": "Action gateway not configured; action queued"}
