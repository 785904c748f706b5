from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from cyberguard.errors import NotFound, ValidationError
from cyberguard.logging_config import logger
from cyberguard.models import ROLE_ASSISTANT, ROLE_USER
from cyberguard.provider.catalog import resolve_model
from cyberguard.schemas import ChatResponse
from cyberguard.services.chat_orchestrator import ChatOrchestrator
from cyberguard.services.conversation_store import append_message, get_session
from cyberguard.services.history_service import build_context_window

LOG_PREVIEW_CHARS = 50


async def handle_chat_turn(
    db: Session,
    orchestrator: ChatOrchestrator,
    *,
    session_id: UUID,
    message: str,
    model: str | None = None,
) -> ChatResponse:
    """
    Run one chat turn end to end.

    The user message is committed before any provider is contacted, so it
    survives even when both providers fail and OrchestrationExhausted
    propagates to the caller.
    """
    if not message or not message.strip():
        raise ValidationError("sessionId and message are required")

    if get_session(db, session_id) is None:
        raise NotFound(f"Session {session_id} not found", details={"sessionId": str(session_id)})

    resolved_model = resolve_model(model)

    append_message(db, session_id=session_id, role=ROLE_USER, content=message)
    window = build_context_window(db, session_id)

    result = await orchestrator.generate_reply(
        message=message,
        history=window,
        model=resolved_model,
    )

    append_message(db, session_id=session_id, role=ROLE_ASSISTANT, content=result.reply)
    logger.info(
        "[%s] Session %s: %r -> reply stored (fallback=%s)",
        resolved_model,
        session_id,
        message[:LOG_PREVIEW_CHARS],
        result.used_fallback,
    )
    return ChatResponse(response=result.reply, model=resolved_model)


__all__ = ["LOG_PREVIEW_CHARS", "handle_chat_turn"]
