from .base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin
from .chat_session import ChatSession
from .message import MESSAGE_ROLES, ROLE_ASSISTANT, ROLE_USER, Message

__all__ = [
    "Base",
    "ChatSession",
    "CreatedAtMixin",
    "MESSAGE_ROLES",
    "Message",
    "ROLE_ASSISTANT",
    "ROLE_USER",
    "UUIDPrimaryKeyMixin",
]
