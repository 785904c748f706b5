from __future__ import annotations

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from cyberguard.models import Message
from cyberguard.schemas.common import ensure_utc
from cyberguard.services.conversation_store import get_history
from cyberguard.settings import settings


def build_context_window(
    db: Session,
    session_id: UUID,
    max_turns: int | None = None,
) -> list[Message]:
    """
    Return the most recent `max_turns` messages of a session, oldest first.

    Only this window is sent to providers; earlier turns stay in the store.
    `max_turns <= 0` disables truncation.
    """
    if max_turns is None:
        max_turns = settings.chat_context_max_messages
    if max_turns <= 0:
        return get_history(db, session_id)

    stmt = (
        select(Message)
        .where(Message.session_id == session_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(max_turns)
    )
    newest_first = list(db.execute(stmt).scalars().all())
    return list(reversed(newest_first))


def serialize_history(messages: Sequence[Message]) -> list[dict[str, Any]]:
    """JSON-ready history entries as the relay receives them."""
    return [
        {
            "id": msg.id,
            "role": msg.role,
            "content": msg.content,
            "createdAt": ensure_utc(msg.created_at).isoformat() if msg.created_at else None,
        }
        for msg in messages
    ]


__all__ = ["build_context_window", "serialize_history"]
