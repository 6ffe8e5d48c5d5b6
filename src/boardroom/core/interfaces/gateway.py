"""
Action Gateway Protocol

Boundary for externally visible side effects (email, SMS, calls, web
lookups, board/classroom updates, financial models). Gateways are
unreliable and may be absent entirely.
"""

from typing import Any, Protocol


class ActionGatewayError(Exception):
    """Raised when an action gateway cannot complete a call."""


class ActionGateway(Protocol):
    """Protocol for invoking an external action by name."""

    async def invoke(self, action_name: str, params: dict[str, Any]) -> dict[str, Any]:
        """
        Invoke an external action.

        Args:
            action_name: Gateway function name (e.g. "send-email")
            params: Structured parameters for the function

        Returns:
            Dict with 'success' (bool), and 'data' or 'error'
        """
        ...
