import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pacer.auth import get_current_user_id
from pacer.database import get_db
from pacer.events import log_event
from pacer.schemas import ChatMessage, ChatRequest, ChatResponse
from pacer.services.coach_service import HELP_MESSAGE, build_system_prompt
from pacer.services.plan_defaults import DEFAULT_SETTINGS
from pacer.services.plan_updates import process_coach_reply
from pacer.services.stores import PlanStore, SettingsStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/coach", tags=["coach"])


@router.post("/chat", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    request: Request,
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Send a message to the coach and apply any plan changes it asks for."""
    coach = getattr(request.app.state, "coach", None)
    if coach is None:
        return ChatResponse(reply=HELP_MESSAGE, updates=[], plan_updated=False)

    settings = await SettingsStore(session, user_id).load() or DEFAULT_SETTINGS
    plans = PlanStore(session, user_id)
    plan = await plans.load_or_create()

    system_prompt = build_system_prompt(settings, plan, date.today())
    conversation = payload.history + [ChatMessage(role="user", content=payload.message)]
    raw_reply = await coach.send(conversation, system_prompt)

    result = process_coach_reply(raw_reply, plan)
    plan_updated = False
    if result.applied > 0:
        plan_updated = await plans.save(result.plan)
        logger.info(f"Coach updated {result.applied} workout(s) for user {user_id}")
        await log_event(session, "feature", "plan_updated", {"applied": result.applied})

    await log_event(session, "feature", "coach_chat")
    return ChatResponse(reply=result.display_text, updates=result.updates, plan_updated=plan_updated)
