from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .message import Message


class ChatSession(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """A conversation opened under a free-text display name."""

    __tablename__ = "sessions"

    identity_label: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    messages: Mapped[list["Message"]] = relationship(
        "Message",
        back_populates="session",
        order_by="[Message.created_at, Message.id]",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


__all__ = ["ChatSession"]
