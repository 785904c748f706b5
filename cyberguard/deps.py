from collections.abc import AsyncIterator, Iterator

import httpx
from fastapi import Depends
from sqlalchemy.orm import Session

from .db import get_db_session
from .services.admin_token_service import AdminTokenStore, get_admin_token_store
from .services.chat_orchestrator import ChatOrchestrator, build_orchestrator
from .settings import settings


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """
    Short-lived AsyncClient for relay / provider calls.
    """
    async with httpx.AsyncClient(timeout=settings.upstream_timeout) as client:
        yield client


def get_db() -> Iterator[Session]:
    """
    Provide a synchronous SQLAlchemy session.
    """
    yield from get_db_session()


def get_token_store() -> AdminTokenStore:
    return get_admin_token_store()


def get_orchestrator(
    client: httpx.AsyncClient = Depends(get_http_client),
) -> ChatOrchestrator:
    return build_orchestrator(client)


__all__ = ["get_db", "get_http_client", "get_orchestrator", "get_token_store"]
