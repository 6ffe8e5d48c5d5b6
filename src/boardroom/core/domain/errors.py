"""Domain exceptions."""


class UnknownAgentError(ValueError):
    """Raised when an agent id is not part of the agent registry."""

    def __init__(self, agent_id: str):
        super().__init__(f"Unknown agent: {agent_id}")
        self.agent_id = agent_id


class PermissionRequestNotFound(KeyError):
    """Raised when a permission request id does not exist."""

    def __init__(self, request_id: str):
        super().__init__(request_id)
        self.request_id = request_id
