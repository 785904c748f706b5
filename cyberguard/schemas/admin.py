from pydantic import BaseModel, Field

from .session import MessageResponse, SessionSummary


class AdminLoginRequest(BaseModel):
    username: str
    password: str


class AdminLoginResponse(BaseModel):
    token: str = Field(..., description="Opaque bearer token, valid for ADMIN_TOKEN_TTL_SECONDS")


class DeleteSessionResponse(BaseModel):
    success: bool


class SessionLog(SessionSummary):
    """One admin search row: the session plus its full ordered transcript."""

    messages: list[MessageResponse] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str = "ok"


__all__ = [
    "AdminLoginRequest",
    "AdminLoginResponse",
    "DeleteSessionResponse",
    "HealthResponse",
    "SessionLog",
]
