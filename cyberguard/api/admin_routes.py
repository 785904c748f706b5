from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from cyberguard.admin_auth import require_admin
from cyberguard.deps import get_db, get_token_store
from cyberguard.errors import NotFound, ValidationError
from cyberguard.logging_config import logger
from cyberguard.schemas import (
    AdminLoginRequest,
    AdminLoginResponse,
    DeleteSessionResponse,
    SessionLog,
    SessionSummary,
)
from cyberguard.services.admin_token_service import AdminTokenStore, login
from cyberguard.services.log_search_service import SearchFilter, search_logs
from cyberguard.services.session_service import delete_session, list_all_sessions

router = APIRouter(tags=["admin"])


def _parse_date(name: str, raw: str | None) -> datetime | None:
    """
    Parse an ISO-8601 date or datetime query value. A bare date means
    midnight at the start of that day.
    """
    if raw is None or not raw.strip():
        return None
    try:
        return datetime.fromisoformat(raw.strip())
    except ValueError as exc:
        raise ValidationError(
            f"{name} must be an ISO-8601 date or datetime",
            details={name: raw},
        ) from exc


@router.post("/admin/login", response_model=AdminLoginResponse)
async def admin_login_endpoint(
    payload: AdminLoginRequest,
    store: AdminTokenStore = Depends(get_token_store),
) -> AdminLoginResponse:
    token = login(store, payload.username, payload.password)
    return AdminLoginResponse(token=token)


@router.get(
    "/sessions",
    response_model=list[SessionSummary],
    dependencies=[Depends(require_admin)],
)
def list_sessions_endpoint(db: Session = Depends(get_db)) -> list[SessionSummary]:
    return list_all_sessions(db)


@router.delete(
    "/sessions/{session_id}",
    response_model=DeleteSessionResponse,
    dependencies=[Depends(require_admin)],
)
def delete_session_endpoint(
    session_id: UUID,
    db: Session = Depends(get_db),
) -> DeleteSessionResponse:
    if not delete_session(db, session_id):
        raise NotFound(f"Session {session_id} not found", details={"sessionId": str(session_id)})
    logger.info("Admin deleted session %s", session_id)
    return DeleteSessionResponse(success=True)


@router.get(
    "/search",
    response_model=list[SessionLog],
    dependencies=[Depends(require_admin)],
)
def search_endpoint(
    identity: str | None = Query(None, description="Case-insensitive substring of the display name"),
    user_name: str | None = Query(None, alias="userName", include_in_schema=False),
    date_from: str | None = Query(None, alias="dateFrom"),
    date_to: str | None = Query(None, alias="dateTo"),
    content: str | None = Query(None, description="Case-insensitive substring of any message"),
    db: Session = Depends(get_db),
) -> list[SessionLog]:
    search = SearchFilter(
        identity=identity if identity is not None else user_name,
        date_from=_parse_date("dateFrom", date_from),
        date_to=_parse_date("dateTo", date_to),
        content=content,
    )
    return search_logs(db, search)


__all__ = ["router"]
