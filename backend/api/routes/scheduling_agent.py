"""
Scheduling agent routes.

The briefing scheduling agent is not built yet; these endpoints acknowledge
requests so callers (including the inbound email webhook) get a stable 200.
"""

from fastapi import APIRouter

from api.schemas.common import MessageResponse

router = APIRouter(prefix="/scheduling-agent", tags=["Scheduling Agent"])


@router.post("", response_model=MessageResponse)
async def scheduling_agent():
    return MessageResponse(message="Scheduling agent endpoint - to be implemented")


@router.post("/webhook", response_model=MessageResponse)
async def scheduling_agent_webhook():
    return MessageResponse(message="Scheduling agent webhook endpoint - to be implemented")


@router.get("/templates", response_model=MessageResponse)
async def scheduling_agent_templates():
    return MessageResponse(message="Scheduling agent templates endpoint - to be implemented")
