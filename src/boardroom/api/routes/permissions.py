"""
Permission API Routes

Endpoints:
- POST /api/v1/permissions/check              - Ask the gate whether an action needs approval
- GET  /api/v1/permissions/pending            - Pending requests, highest priority first
- GET  /api/v1/permissions/activity           - Recent permission activity
- GET  /api/v1/permissions/metrics            - Approval metrics
- POST /api/v1/permissions/emergency          - Enable or disable emergency mode
- GET  /api/v1/permissions/{request_id}       - One request
- POST /api/v1/permissions/{request_id}/approve
- POST /api/v1/permissions/{request_id}/deny
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from boardroom.api.dependencies import get_boardroom
from boardroom.application.factory import Boardroom
from boardroom.core.domain.errors import PermissionRequestNotFound

router = APIRouter()


class CheckRequest(BaseModel):
    action: str
    agent_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class ApproveRequest(BaseModel):
    approved_by: str = "executive"


class DenyRequest(BaseModel):
    reason: str = ""
    denied_by: str = "executive"


class EmergencyRequest(BaseModel):
    enabled: bool
    reason: str = ""


class DecisionResponse(BaseModel):
    """Outcome of approve/deny. changed is False when the request was already terminal."""
    request_id: str
    changed: bool
    status: str


@router.post("/permissions/check")
def check_permission(body: CheckRequest, boardroom: Boardroom = Depends(get_boardroom)):
    required = boardroom.permissions.requires_approval(body.action, body.agent_id, body.metadata)
    return {"action": body.action, "requires_approval": required}


@router.get("/permissions/pending")
def pending_requests(boardroom: Boardroom = Depends(get_boardroom)):
    return [r.to_dict() for r in boardroom.permissions.get_pending_requests()]


@router.get("/permissions/activity")
def recent_activity(limit: int = 20, boardroom: Boardroom = Depends(get_boardroom)):
    return [e.to_dict() for e in boardroom.permissions.get_recent_activity(limit)]


@router.get("/permissions/metrics")
def metrics(boardroom: Boardroom = Depends(get_boardroom)):
    return boardroom.permissions.get_metrics()


@router.post("/permissions/emergency")
def emergency_mode(body: EmergencyRequest, boardroom: Boardroom = Depends(get_boardroom)):
    if body.enabled:
        denied = boardroom.permissions.enable_emergency_mode(body.reason or "manual activation")
        return {"emergency_mode": True, "denied_requests": denied}
    boardroom.permissions.disable_emergency_mode()
    return {"emergency_mode": False, "denied_requests": 0}


def _get_request(boardroom: Boardroom, request_id: str):
    try:
        return boardroom.permissions.get_request(request_id)
    except PermissionRequestNotFound:
        raise HTTPException(status_code=404, detail=f"Permission request not found: {request_id}")


@router.get("/permissions/{request_id}")
def get_request(request_id: str, boardroom: Boardroom = Depends(get_boardroom)):
    return _get_request(boardroom, request_id).to_dict()


@router.post("/permissions/{request_id}/approve", response_model=DecisionResponse)
def approve(request_id: str, body: ApproveRequest, boardroom: Boardroom = Depends(get_boardroom)):
    request = _get_request(boardroom, request_id)
    changed = boardroom.permissions.approve(request_id, approved_by=body.approved_by)
    return DecisionResponse(request_id=request_id, changed=changed, status=request.status.value)


@router.post("/permissions/{request_id}/deny", response_model=DecisionResponse)
def deny(request_id: str, body: DenyRequest, boardroom: Boardroom = Depends(get_boardroom)):
    request = _get_request(boardroom, request_id)
    changed = boardroom.permissions.deny(request_id, reason=body.reason, denied_by=body.denied_by)
    return DecisionResponse(request_id=request_id, changed=changed, status=request.status.value)
