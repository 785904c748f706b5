"""
Shared pytest configuration.

This file ensures the project root is on sys.path so that `import cyberguard`
works consistently in all tests, and points the default engine at an
in-memory database before any application module is imported.
"""

import os
import sys
from pathlib import Path

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"

# Ensure project root is importable for test modules.
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from cyberguard.routes import create_app  # noqa: E402
from cyberguard.settings import settings  # noqa: E402
from tests.utils import (  # noqa: E402
    FakeClock,
    UpstreamStub,
    install_inmemory_db,
    install_token_store,
    install_upstream_stub,
    make_session_factory,
)


@pytest.fixture(autouse=True)
def _stable_settings(monkeypatch):
    """Pin the knobs tests rely on, whatever the local .env says."""
    monkeypatch.setattr(settings, "max_sessions_per_identity", 3)
    monkeypatch.setattr(settings, "chat_context_max_messages", 20)
    monkeypatch.setattr(settings, "default_model", "openai/gpt-4o")
    monkeypatch.setattr(settings, "relay_webhook_url", "http://relay.test/webhook/cyber-chat")
    monkeypatch.setattr(settings, "openrouter_api_key", "sk-test")  # pragma: allowlist secret
    monkeypatch.setattr(settings, "openrouter_base_url", "https://openrouter.test/api/v1")
    monkeypatch.setattr(settings, "admin_username", "admin")
    monkeypatch.setattr(settings, "admin_password", "cyber_admin_2026")
    monkeypatch.setattr(settings, "admin_token_ttl_seconds", 8 * 60 * 60)
    monkeypatch.setattr(settings, "search_result_limit", 50)
    monkeypatch.setattr(settings, "system_prompt", None)


@pytest.fixture()
def db_session():
    SessionLocal = make_session_factory()
    with SessionLocal() as session:
        yield session


@pytest.fixture()
def upstream() -> UpstreamStub:
    return UpstreamStub()


@pytest.fixture()
def token_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def app_with_inmemory_db(upstream, token_clock):
    app = create_app()
    SessionLocal = install_inmemory_db(app)
    install_upstream_stub(app, upstream)
    install_token_store(app, token_clock)
    yield app, SessionLocal
    app.dependency_overrides.clear()


@pytest.fixture()
def client(app_with_inmemory_db):
    app, _ = app_with_inmemory_db
    with TestClient(app) as test_client:
        yield test_client
