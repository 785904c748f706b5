from typing import Any, Dict, Optional

from fastapi import status
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standard error payload returned for every known failure:
    {
        "error": "CapacityExceeded",
        "message": "Maximum of 3 active sessions reached for this name",
        "code": 403,
        "details": {...}
    }
    """

    error: str = Field(..., description="Machine-readable error type")
    message: str = Field(..., description="Human-readable error message")
    code: int = Field(..., description="HTTP status code for this error")
    details: Optional[Dict[str, Any]] = Field(
        default=None, description="Optional structured error details"
    )


class ServiceError(Exception):
    """
    Base class for the known error taxonomy.

    Services raise these; the HTTP layer turns them into ErrorResponse
    bodies with the class-level status code.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "InternalError"

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=self.error,
            message=self.message,
            code=self.status_code,
            details=self.details,
        )


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "ValidationError"


class CapacityExceeded(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "CapacityExceeded"


class Unauthorized(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"


class InvalidCredentials(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "InvalidCredentials"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "NotFound"


class ProviderFailure(ServiceError):
    """
    A single relay/provider attempt failed (non-2xx, transport error,
    timeout or unusable body). Caught by the orchestrator, never returned
    to clients as-is.
    """

    status_code = status.HTTP_502_BAD_GATEWAY
    error = "ProviderFailure"

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        upstream_status: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            details={"provider": provider, "status": upstream_status},
        )
        self.provider = provider
        self.upstream_status = upstream_status
        self.body = body


class OrchestrationExhausted(ServiceError):
    """Both the primary relay and the direct fallback failed for a turn."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "OrchestrationExhausted"

    def __init__(self, primary_error: ProviderFailure, fallback_error: ProviderFailure) -> None:
        # Upstream error text stays in the logs; clients only see the generic message.
        super().__init__("Failed to process message")
        self.primary_error = primary_error
        self.fallback_error = fallback_error


__all__ = [
    "CapacityExceeded",
    "ErrorResponse",
    "InvalidCredentials",
    "NotFound",
    "OrchestrationExhausted",
    "ProviderFailure",
    "ServiceError",
    "Unauthorized",
    "ValidationError",
]
