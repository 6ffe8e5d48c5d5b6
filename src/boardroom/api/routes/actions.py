"""
Action API Routes

Endpoints:
- GET  /api/v1/actions                      - Dispatchable actions
- POST /api/v1/actions/{action}             - Dispatch an action through the permission gate
- POST /api/v1/actions/replay/{request_id}  - Re-issue an approved, queued action
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from boardroom.api.dependencies import get_boardroom
from boardroom.application.factory import Boardroom
from boardroom.core.domain.dispatcher import ACTIONS
from boardroom.core.domain.models import Priority

router = APIRouter()


class DispatchRequest(BaseModel):
    agent_id: str
    params: Dict[str, Any] = Field(default_factory=dict)
    description: Optional[str] = None
    priority: Optional[Priority] = None


@router.get("/actions")
def list_actions():
    return [
        {
            "name": spec.name,
            "gateway_function": spec.gateway_function,
            "permission_action": spec.permission_action,
            "channel": spec.channel,
        }
        for spec in ACTIONS.values()
    ]


@router.post("/actions/replay/{request_id}")
async def replay_action(request_id: str, boardroom: Boardroom = Depends(get_boardroom)):
    result = await boardroom.dispatcher.replay(request_id)
    return result.to_dict()


@router.post("/actions/{action}")
async def dispatch_action(
    action: str, body: DispatchRequest, boardroom: Boardroom = Depends(get_boardroom)
):
    """Always answers 200; the result status carries success, pending_approval or error."""
    result = await boardroom.dispatcher.dispatch(
        action,
        body.agent_id,
        body.params,
        description=body.description,
        priority=body.priority,
    )
    return result.to_dict()
