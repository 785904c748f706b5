from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from cyberguard.errors import ValidationError
from cyberguard.models import MESSAGE_ROLES, ChatSession, Message


def history_order():
    """Canonical message order: creation time, then insertion sequence."""
    return (Message.created_at.asc(), Message.id.asc())


def get_session(db: Session, session_id: UUID) -> ChatSession | None:
    return db.get(ChatSession, session_id)


def append_message(db: Session, *, session_id: UUID, role: str, content: str) -> Message:
    """
    Persist one turn and commit immediately.

    Messages are never updated afterwards; callers that need the row later
    re-read it through get_history().
    """
    if role not in MESSAGE_ROLES:
        raise ValidationError(
            f"Unsupported message role '{role}'",
            details={"allowed": list(MESSAGE_ROLES)},
        )
    message = Message(session_id=session_id, role=role, content=content)
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def get_history(db: Session, session_id: UUID) -> list[Message]:
    stmt = select(Message).where(Message.session_id == session_id).order_by(*history_order())
    return list(db.execute(stmt).scalars().all())


def count_messages(db: Session, session_id: UUID) -> int:
    stmt = select(func.count(Message.id)).where(Message.session_id == session_id)
    return int(db.execute(stmt).scalar_one())


__all__ = [
    "append_message",
    "count_messages",
    "get_history",
    "get_session",
    "history_order",
]
