"""FastAPI dependencies."""

from fastapi import HTTPException, Request

from boardroom.application.factory import Boardroom
from boardroom.core.domain.agents import AgentProfile, get_profile
from boardroom.core.domain.errors import UnknownAgentError


def get_boardroom(request: Request) -> Boardroom:
    return request.app.state.boardroom


def require_profile(agent_id: str) -> AgentProfile:
    try:
        return get_profile(agent_id)
    except UnknownAgentError as e:
        raise HTTPException(status_code=404, detail=str(e))
