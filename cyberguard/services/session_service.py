"""
Session lifecycle: capacity-gated creation, listing and cascade deletion.
"""

from __future__ import annotations

import hashlib
from uuid import UUID

from sqlalchemy import Select, delete, func, select
from sqlalchemy.orm import Session

from cyberguard.errors import CapacityExceeded, ValidationError
from cyberguard.logging_config import logger
from cyberguard.models import ChatSession, Message
from cyberguard.schemas import SessionSummary
from cyberguard.settings import settings

IDENTITY_LABEL_MAX_LENGTH = 100


def normalize_identity_label(identity_label: str | None) -> str:
    label = (identity_label or "").strip()
    if not label:
        raise ValidationError("identityLabel is required")
    if len(label) > IDENTITY_LABEL_MAX_LENGTH:
        raise ValidationError(
            f"identityLabel must be at most {IDENTITY_LABEL_MAX_LENGTH} characters",
            details={"length": len(label)},
        )
    return label


def _advisory_lock_key(identity_label: str) -> int:
    digest = hashlib.sha256(identity_label.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big", signed=True)


def _lock_identity(db: Session, identity_label: str) -> None:
    """
    Serialize concurrent creates for one label on PostgreSQL.

    The transaction-scoped advisory lock is released on commit/rollback.
    Other dialects get no lock, so there the cap is a soft limit.
    """
    if db.get_bind().dialect.name != "postgresql":
        return
    db.execute(select(func.pg_advisory_xact_lock(_advisory_lock_key(identity_label))))


def count_active_sessions(db: Session, identity_label: str) -> int:
    stmt = select(func.count(ChatSession.id)).where(ChatSession.identity_label == identity_label)
    return int(db.execute(stmt).scalar_one())


def create_session(db: Session, identity_label: str | None) -> ChatSession:
    label = normalize_identity_label(identity_label)
    limit = settings.max_sessions_per_identity

    _lock_identity(db, label)
    active = count_active_sessions(db, label)
    if active >= limit:
        db.rollback()
        logger.warning(
            "Session capacity reached for %r (%d/%d); refusing to create another",
            label,
            active,
            limit,
        )
        raise CapacityExceeded(
            f"Maximum of {limit} active sessions reached for this name",
            details={"identityLabel": label, "activeSessions": active, "maxSessions": limit},
        )

    session = ChatSession(identity_label=label)
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info("New session %s for %r", session.id, label)
    return session


def _summaries_stmt() -> Select:
    message_count = func.count(Message.id).label("message_count")
    return (
        select(ChatSession, message_count)
        .outerjoin(Message, Message.session_id == ChatSession.id)
        .group_by(ChatSession.id)
        .order_by(ChatSession.created_at.desc())
    )


def _to_summaries(rows) -> list[SessionSummary]:
    return [
        SessionSummary(
            id=session.id,
            identity_label=session.identity_label,
            created_at=session.created_at,
            message_count=int(count or 0),
        )
        for session, count in rows
    ]


def list_sessions_for_identity(db: Session, identity_label: str) -> list[SessionSummary]:
    stmt = _summaries_stmt().where(ChatSession.identity_label == identity_label)
    return _to_summaries(db.execute(stmt).all())


def list_all_sessions(db: Session) -> list[SessionSummary]:
    return _to_summaries(db.execute(_summaries_stmt()).all())


def delete_session(db: Session, session_id: UUID) -> bool:
    """
    Delete a session together with all of its messages in one transaction.
    Returns False when no such session exists.
    """
    db.execute(delete(Message).where(Message.session_id == session_id))
    result = db.execute(delete(ChatSession).where(ChatSession.id == session_id))
    if not result.rowcount:
        db.rollback()
        return False
    db.commit()
    return True


__all__ = [
    "IDENTITY_LABEL_MAX_LENGTH",
    "count_active_sessions",
    "create_session",
    "delete_session",
    "list_all_sessions",
    "list_sessions_for_identity",
    "normalize_identity_label",
]
