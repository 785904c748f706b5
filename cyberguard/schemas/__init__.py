from .admin import (
    AdminLoginRequest,
    AdminLoginResponse,
    DeleteSessionResponse,
    HealthResponse,
    SessionLog,
)
from .chat import (
    ChatRequest,
    ChatResponse,
    OrchestrationResult,
    ProviderAttempt,
    ProviderMessage,
)
from .common import CamelModel, UTCDateTime
from .model import CatalogModel
from .session import (
    IdentitySessionsResponse,
    MessageResponse,
    SessionCreateRequest,
    SessionResponse,
    SessionSummary,
)

__all__ = [
    "AdminLoginRequest",
    "AdminLoginResponse",
    "CamelModel",
    "CatalogModel",
    "ChatRequest",
    "ChatResponse",
    "DeleteSessionResponse",
    "HealthResponse",
    "IdentitySessionsResponse",
    "MessageResponse",
    "OrchestrationResult",
    "ProviderAttempt",
    "ProviderMessage",
    "SessionCreateRequest",
    "SessionLog",
    "SessionResponse",
    "SessionSummary",
    "UTCDateTime",
]
