from __future__ import annotations

import json

import httpx
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from cyberguard.db import enable_sqlite_foreign_keys, get_db_session
from cyberguard.deps import get_db, get_http_client, get_token_store
from cyberguard.models import Base
from cyberguard.services.admin_token_service import AdminTokenStore
from cyberguard.settings import settings


def make_session_factory() -> sessionmaker[Session]:
    """
    Fresh in-memory SQLite database with the full schema and FK enforcement.
    """
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)

    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        future=True,
        expire_on_commit=False,
    )


def install_inmemory_db(app) -> sessionmaker[Session]:
    """
    Attach an in-memory SQLite database to the FastAPI app.
    """
    SessionLocal = make_session_factory()

    def override_get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_db_session] = override_get_db
    return SessionLocal


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def install_token_store(app, clock: FakeClock) -> AdminTokenStore:
    store = AdminTokenStore(ttl_seconds=settings.admin_token_ttl_seconds, clock=clock)
    app.dependency_overrides[get_token_store] = lambda: store
    return store


class UpstreamStub:
    """
    Scripted relay + OpenRouter endpoints behind an httpx.MockTransport.

    Requests to `.../chat/completions` go to the provider side; everything
    else is treated as the relay webhook.
    """

    def __init__(self) -> None:
        self.relay_status = 200
        self.relay_json: object = {"response": "relay reply"}
        self.relay_text: str | None = None
        self.relay_error: Exception | None = None

        self.provider_status = 200
        self.provider_json: object = {"choices": [{"message": {"content": "fallback reply"}}]}

        self.relay_requests: list[httpx.Request] = []
        self.provider_requests: list[httpx.Request] = []

    @property
    def relay_calls(self) -> int:
        return len(self.relay_requests)

    @property
    def provider_calls(self) -> int:
        return len(self.provider_requests)

    def relay_payload(self, index: int = -1) -> dict:
        return json.loads(self.relay_requests[index].content)

    def provider_payload(self, index: int = -1) -> dict:
        return json.loads(self.provider_requests[index].content)

    def fail_relay(self, status_code: int = 500) -> None:
        self.relay_status = status_code
        self.relay_json = {"message": "Workflow could not be started"}

    def fail_provider(self, status_code: int = 502) -> None:
        self.provider_status = status_code
        self.provider_json = {"error": {"message": "upstream exploded"}}

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/chat/completions"):
            self.provider_requests.append(request)
            return httpx.Response(self.provider_status, json=self.provider_json)

        self.relay_requests.append(request)
        if self.relay_error is not None:
            raise self.relay_error
        if self.relay_text is not None:
            return httpx.Response(self.relay_status, text=self.relay_text)
        return httpx.Response(self.relay_status, json=self.relay_json)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


def install_upstream_stub(app, stub: UpstreamStub) -> None:
    async def override_get_http_client():
        async with stub.client() as client:
            yield client

    app.dependency_overrides[get_http_client] = override_get_http_client
