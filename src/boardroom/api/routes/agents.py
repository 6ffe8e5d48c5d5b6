"""
Agent API Routes

Endpoints:
- GET  /api/v1/agents                          - List the agent registry
- GET  /api/v1/agents/{agent_id}               - Agent profile
- POST /api/v1/agents/{agent_id}/requests      - Process a request synchronously
- POST /api/v1/agents/{agent_id}/requests/stream - Process a request, streaming thoughts via SSE
- GET  /api/v1/agents/{agent_id}/thought       - Current AgentThought
- GET  /api/v1/agents/{agent_id}/thoughts/stream - Observe thought updates via SSE
- GET  /api/v1/agents/{agent_id}/memory        - Conversation memory
- GET  /api/v1/thoughts/active                 - Agents currently thinking
- GET  /api/v1/plans                           - Plans (optionally per agent)
- GET  /api/v1/plans/{plan_id}                 - One plan
"""

import asyncio
import json
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from boardroom.api.dependencies import get_boardroom, require_profile
from boardroom.application.factory import Boardroom
from boardroom.core.domain.agents import AgentProfile, list_profiles

router = APIRouter()


class AgentResponse(BaseModel):
    agent_id: str
    name: str
    role: str
    tools: List[str]
    delegates_to: List[str]
    expertise: List[str]


class ProcessRequestBody(BaseModel):
    """Request text addressed to an agent."""
    request: str = Field(min_length=1)
    context: Optional[Dict[str, Any]] = None


def _agent_response(profile: AgentProfile) -> AgentResponse:
    return AgentResponse(
        agent_id=profile.id,
        name=profile.name,
        role=profile.role,
        tools=list(profile.tools),
        delegates_to=[d.value for d in profile.delegates_to],
        expertise=list(profile.expertise),
    )


def _sse(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload, default=str)}\n\n"


@router.get("/agents", response_model=List[AgentResponse])
def list_agents():
    return [_agent_response(p) for p in list_profiles()]


@router.get("/agents/{agent_id}", response_model=AgentResponse)
def get_agent(profile: AgentProfile = Depends(require_profile)):
    return _agent_response(profile)


@router.post("/agents/{agent_id}/requests")
async def process_request(
    body: ProcessRequestBody,
    profile: AgentProfile = Depends(require_profile),
    boardroom: Boardroom = Depends(get_boardroom),
):
    """Run the full planning pipeline and return response, plan and deliverables."""
    result = await boardroom.orchestrator.process_request(profile.id, body.request, body.context)
    return result.to_dict()


@router.post("/agents/{agent_id}/requests/stream")
async def process_request_stream(
    body: ProcessRequestBody,
    profile: AgentProfile = Depends(require_profile),
    boardroom: Boardroom = Depends(get_boardroom),
):
    """Run the pipeline and stream every AgentThought change, then the final result."""
    agent_id = profile.id

    async def event_generator():
        queue: asyncio.Queue = asyncio.Queue()

        def _on_thought(thought):
            if thought.agent_id == agent_id:
                queue.put_nowait({"type": "thought", "thought": thought.to_dict()})

        unsubscribe = boardroom.thought_stream.subscribe(_on_thought)
        task = asyncio.create_task(
            boardroom.orchestrator.process_request(agent_id, body.request, body.context)
        )
        task.add_done_callback(lambda _t: queue.put_nowait(None))
        try:
            while True:
                item = await queue.get()
                if item is None:
                    break
                yield _sse(item)
            yield _sse({"type": "result", "result": task.result().to_dict()})
        finally:
            unsubscribe()

    return StreamingResponse(event_generator(), media_type="text/event-stream")


@router.get("/agents/{agent_id}/thought")
def get_thought(
    profile: AgentProfile = Depends(require_profile),
    boardroom: Boardroom = Depends(get_boardroom),
):
    thought = boardroom.thought_stream.get_active_thought(profile.id)
    if thought is None:
        raise HTTPException(status_code=404, detail=f"No thoughts recorded for {profile.id}")
    return thought.to_dict()


@router.get("/agents/{agent_id}/thoughts/stream")
async def observe_thoughts(
    profile: AgentProfile = Depends(require_profile),
    boardroom: Boardroom = Depends(get_boardroom),
):
    """Observe thought updates of one agent until its current work finishes."""

    async def event_generator():
        async for snapshot in boardroom.thought_stream.stream(agent_id=profile.id):
            yield _sse({"type": "thought", "thought": snapshot})

    return StreamingResponse(event_generator(), media_type="text/event-stream")


@router.get("/agents/{agent_id}/memory")
def get_memory(
    profile: AgentProfile = Depends(require_profile),
    boardroom: Boardroom = Depends(get_boardroom),
):
    return boardroom.memory.get(profile.id).to_dict()


@router.get("/thoughts/active")
def active_thoughts(boardroom: Boardroom = Depends(get_boardroom)):
    return [t.to_dict() for t in boardroom.thought_stream.get_all_active_thoughts()]


@router.get("/plans")
def list_plans(agent_id: Optional[str] = None, boardroom: Boardroom = Depends(get_boardroom)):
    return [p.to_dict() for p in boardroom.orchestrator.get_plans(agent_id)]


@router.get("/plans/{plan_id}")
def get_plan(plan_id: str, boardroom: Boardroom = Depends(get_boardroom)):
    plan = boardroom.orchestrator.get_plan(plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail=f"Plan not found: {plan_id}")
    return plan.to_dict()
