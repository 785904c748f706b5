from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from cyberguard.deps import get_db
from cyberguard.schemas import (
    IdentitySessionsResponse,
    MessageResponse,
    SessionCreateRequest,
    SessionResponse,
)
from cyberguard.services.conversation_store import get_history
from cyberguard.services.session_service import (
    create_session,
    list_sessions_for_identity,
    normalize_identity_label,
)
from cyberguard.settings import settings

router = APIRouter(tags=["sessions"])


@router.post(
    "/session",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_session_endpoint(
    payload: SessionCreateRequest,
    db: Session = Depends(get_db),
) -> SessionResponse:
    session = create_session(db, payload.identity_label)
    return SessionResponse.model_validate(session)


@router.get(
    "/session/identity/{identity_label}",
    response_model=IdentitySessionsResponse,
)
def identity_sessions_endpoint(
    identity_label: str,
    db: Session = Depends(get_db),
) -> IdentitySessionsResponse:
    """
    Sessions held by one display name, for the "N of 3 used" indicator.
    """
    label = normalize_identity_label(identity_label)
    sessions = list_sessions_for_identity(db, label)
    return IdentitySessionsResponse(
        identity_label=label,
        active_sessions=len(sessions),
        max_sessions=settings.max_sessions_per_identity,
        sessions=sessions,
    )


@router.get("/history/{session_id}", response_model=list[MessageResponse])
def history_endpoint(
    session_id: str,
    db: Session = Depends(get_db),
) -> list[MessageResponse]:
    """Ordered transcript; an unknown or malformed id yields an empty list."""
    try:
        parsed = UUID(session_id)
    except ValueError:
        return []
    return [MessageResponse.model_validate(m) for m in get_history(db, parsed)]


__all__ = ["router"]
