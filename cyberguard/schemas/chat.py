from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from .common import CamelModel


class ChatRequest(CamelModel):
    session_id: UUID
    message: str
    model: str | None = Field(None, description="Catalog model id; unknown ids fall back to DEFAULT_MODEL")


class ChatResponse(BaseModel):
    response: str
    model: str


class ProviderAttempt(BaseModel):
    """Outcome of one relay/provider call within a chat turn."""

    stage: Literal["primary", "fallback"]
    ok: bool
    error: str | None = None
    upstream_status: int | None = None


class OrchestrationResult(BaseModel):
    reply: str
    model: str
    attempts: list[ProviderAttempt] = Field(default_factory=list)

    @property
    def used_fallback(self) -> bool:
        return any(attempt.stage == "fallback" for attempt in self.attempts)


class ProviderMessage(BaseModel):
    """OpenAI-style chat message sent to the direct provider."""

    role: Literal["system", "user", "assistant"]
    content: str

    def as_payload(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}


__all__ = [
    "ChatRequest",
    "ChatResponse",
    "OrchestrationResult",
    "ProviderAttempt",
    "ProviderMessage",
]
