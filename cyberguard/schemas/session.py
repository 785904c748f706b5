from uuid import UUID

from pydantic import AliasChoices, Field

from .common import CamelModel, UTCDateTime


class SessionCreateRequest(CamelModel):
    """Body of POST /session; `userName` is kept for older web clients."""

    identity_label: str = Field(
        ...,
        validation_alias=AliasChoices("identityLabel", "userName", "identity_label"),
        description="Display name the session is opened under",
    )


class SessionResponse(CamelModel):
    id: UUID
    identity_label: str
    created_at: UTCDateTime


class SessionSummary(SessionResponse):
    message_count: int = Field(0, ge=0)


class IdentitySessionsResponse(CamelModel):
    identity_label: str
    active_sessions: int
    max_sessions: int
    sessions: list[SessionSummary]


class MessageResponse(CamelModel):
    id: int
    role: str
    content: str
    created_at: UTCDateTime


__all__ = [
    "IdentitySessionsResponse",
    "MessageResponse",
    "SessionCreateRequest",
    "SessionResponse",
    "SessionSummary",
]
