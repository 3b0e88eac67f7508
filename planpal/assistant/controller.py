# controller.py
import logging
from typing import List

from fastapi import APIRouter, Depends

from planpal.dependencies import get_bot, get_registry, get_store
from planpal.planning.store import PlanningStore
from . import schema
from .service import PlanPalBot, fresh_id
from .session import SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assistant", tags=["assistant"])


@router.post("/chat", response_model=schema.ChatResponse, response_model_exclude_none=True)
async def chat_endpoint(
    request: schema.ChatRequest,
    bot: PlanPalBot = Depends(get_bot),
    registry: SessionRegistry = Depends(get_registry),
    store: PlanningStore = Depends(get_store),
):
    """
    Send one message to PlanPal.
    Request may include optional session_id — if omitted, server generates one and returns it.
    Always answers 200: model failures come back as the fallback message.
    """
    session = registry.get_or_create(request.session_id)

    user_message = schema.ChatMessage(id=fresh_id(), sender="user", text=request.message)
    store.append_chat_message(session.session_id, user_message)
    store.add_loading_placeholder(session.session_id)

    result = await bot.send_message(request.message, session, location=request.location)
    store.resolve_placeholder(session.session_id, result.message)

    if result.outcome == schema.Outcome.FALLBACK:
        logger.warning("Session %s answered with fallback", session.session_id)

    return schema.ChatResponse(
        session_id=session.session_id,
        outcome=result.outcome,
        message=result.message,
    )


@router.get("/history", response_model=List[schema.ChatMessage], response_model_exclude_none=True)
async def chat_history(session_id: str, store: PlanningStore = Depends(get_store)):
    return store.chat_history(session_id)


@router.post("/clear", status_code=204)
async def clear_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    store: PlanningStore = Depends(get_store),
):
    """
    Drop the session's model history and its chat log. Returns 204.
    """
    await registry.clear(session_id)
    store.clear_chat(session_id)
    return None
