"""
Admin log search: filter sessions by identity, creation date and message
content, returning each hit with its full transcript.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from cyberguard.logging_config import logger
from cyberguard.models import ChatSession, Message
from cyberguard.schemas import MessageResponse, SessionLog
from cyberguard.schemas.common import ensure_utc
from cyberguard.services.conversation_store import history_order
from cyberguard.settings import settings


def _clean(term: str | None) -> str | None:
    if term is None:
        return None
    term = term.strip()
    return term or None


@dataclass(frozen=True)
class SearchFilter:
    identity: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    content: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "identity", _clean(self.identity))
        object.__setattr__(self, "content", _clean(self.content))
        if self.date_from is not None:
            object.__setattr__(self, "date_from", ensure_utc(self.date_from))
        if self.date_to is not None:
            object.__setattr__(self, "date_to", ensure_utc(self.date_to))


def _load_messages(db: Session, session_ids: list[UUID]) -> dict[UUID, list[Message]]:
    grouped: dict[UUID, list[Message]] = defaultdict(list)
    if not session_ids:
        return grouped
    stmt = select(Message).where(Message.session_id.in_(session_ids)).order_by(*history_order())
    for message in db.execute(stmt).scalars():
        grouped[message.session_id].append(message)
    return grouped


def search_logs(db: Session, search: SearchFilter, limit: int | None = None) -> list[SessionLog]:
    """
    Return up to `limit` sessions matching every supplied criterion,
    newest first. Date bounds are inclusive.
    """
    if limit is None:
        limit = settings.search_result_limit

    stmt = select(ChatSession)
    if search.identity:
        stmt = stmt.where(ChatSession.identity_label.icontains(search.identity, autoescape=True))
    if search.date_from is not None:
        stmt = stmt.where(ChatSession.created_at >= search.date_from)
    if search.date_to is not None:
        stmt = stmt.where(ChatSession.created_at <= search.date_to)
    if search.content:
        matching_sessions = select(Message.session_id).where(
            Message.content.icontains(search.content, autoescape=True)
        )
        stmt = stmt.where(ChatSession.id.in_(matching_sessions))
    stmt = stmt.order_by(ChatSession.created_at.desc()).limit(limit)

    sessions = list(db.execute(stmt).scalars().all())
    transcripts = _load_messages(db, [s.id for s in sessions])

    rows = []
    for session in sessions:
        messages = transcripts.get(session.id, [])
        rows.append(
            SessionLog(
                id=session.id,
                identity_label=session.identity_label,
                created_at=session.created_at,
                message_count=len(messages),
                messages=[MessageResponse.model_validate(m) for m in messages],
            )
        )

    logger.info(
        "Log search identity=%r content=%r from=%s to=%s -> %d session(s)",
        search.identity,
        search.content,
        search.date_from,
        search.date_to,
        len(rows),
    )
    return rows


__all__ = ["SearchFilter", "search_logs"]
