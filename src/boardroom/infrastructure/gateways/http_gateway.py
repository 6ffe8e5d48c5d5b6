"""
HTTP Action Gateway

Invokes serverless action functions (send-email, send-sms, make-phone-call,
web-research, financial-analysis, trello-integration, google-classroom, ...)
over HTTP with aiohttp. Transport and remote errors are reported as
``{"success": False, "error": ...}`` rather than raised.
"""

from typing import Any

import aiohttp
import structlog


class HttpActionGateway:
    def __init__(self, base_url: str, api_key: str | None = None, timeout: float = 15.0):
        """
        Initialize the gateway.

        Args:
            base_url: Root URL of the functions host (functions live under /functions/v1/)
            api_key: Bearer token sent with every call
            timeout: Total seconds allowed per HTTP request
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.logger = structlog.get_logger().bind(component="http_action_gateway")

    def function_url(self, action_name: str) -> str:
        return f"{self.base_url}/functions/v1/{action_name}"

    async def invoke(self, action_name: str, params: dict[str, Any]) -> dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        url = self.function_url(action_name)

        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.post(url, json=params, headers=headers) as response:
                    if response.status >= 400:
                        body = await response.text()
                        self.logger.warning(
                            "gateway_http_error", action=action_name, status=response.status, body=body[:200]
                        )
                        return {"success": False, "error": f"HTTP {response.status}: {body[:200]}"}
                    try:
                        payload = await response.json(content_type=None)
                    except ValueError:
                        return {"success": False, "error": "Gateway returned invalid JSON"}
        except Exception as e:
            self.logger.warning("gateway_request_failed", action=action_name, error_type=type(e).__name__)
            return {"success": False, "error": f"{type(e).__name__}: {e}"}

        if not isinstance(payload, dict):
            return {"success": False, "error": "Gateway returned a non-object payload"}
        if "success" not in payload:
            return {"success": True, "data": payload}
        return payload
