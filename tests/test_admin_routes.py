from __future__ import annotations

from uuid import uuid4

import pytest


def _login(client) -> dict[str, str]:
    resp = client.post("/admin/login", json={"username": "admin", "password": "cyber_admin_2026"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}


def _session_with_chat(client, label: str, message: str) -> str:
    session_id = client.post("/session", json={"identityLabel": label}).json()["id"]
    assert client.post("/chat", json={"sessionId": session_id, "message": message}).status_code == 200
    return session_id


def test_login_with_wrong_password_is_401(client):
    resp = client.post("/admin/login", json={"username": "admin", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "InvalidCredentials"


@pytest.mark.parametrize(
    "method, path",
    [("get", "/sessions"), ("delete", f"/sessions/{uuid4()}"), ("get", "/search")],
)
@pytest.mark.parametrize(
    "headers",
    [{}, {"Authorization": "Bearer"}, {"Authorization": "Basic abc"}, {"Authorization": "Bearer forged"}],
)
def test_admin_routes_require_a_valid_bearer_token(client, method, path, headers):
    resp = client.request(method.upper(), path, headers=headers)
    assert resp.status_code == 401
    assert resp.json()["error"] == "Unauthorized"


def test_list_sessions_includes_message_counts(client):
    headers = _login(client)
    chatty = _session_with_chat(client, "Mali", "hello")
    quiet = client.post("/session", json={"identityLabel": "Mali"}).json()["id"]

    rows = client.get("/sessions", headers=headers).json()
    counts = {row["id"]: row["messageCount"] for row in rows}
    assert counts == {chatty: 2, quiet: 0}
    assert {"id", "identityLabel", "createdAt", "messageCount"} == set(rows[0])


def test_delete_session_removes_it_and_its_history(client):
    headers = _login(client)
    session_id = _session_with_chat(client, "Mali", "hello")

    resp = client.delete(f"/sessions/{session_id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    assert client.get(f"/history/{session_id}").json() == []
    assert client.get("/sessions", headers=headers).json() == []

    again = client.delete(f"/sessions/{session_id}", headers=headers)
    assert again.status_code == 404


def test_deleting_frees_a_capacity_slot(client):
    headers = _login(client)
    ids = [client.post("/session", json={"identityLabel": "Mali"}).json()["id"] for _ in range(3)]
    assert client.post("/session", json={"identityLabel": "Mali"}).status_code == 403

    client.delete(f"/sessions/{ids[0]}", headers=headers)

    assert client.post("/session", json={"identityLabel": "Mali"}).status_code == 201


def test_search_combines_identity_and_content(client, upstream):
    headers = _login(client)
    anna = _session_with_chat(client, "Anna", "I clicked a phishing link")
    _session_with_chat(client, "Joanne", "password tips please")
    _session_with_chat(client, "Bob", "phishing again")

    rows = client.get("/search", params={"identity": "ann", "content": "phish"}, headers=headers).json()
    assert [row["id"] for row in rows] == [anna]
    assert rows[0]["messageCount"] == 2
    assert [m["content"] for m in rows[0]["messages"]] == ["I clicked a phishing link", "relay reply"]

    legacy = client.get("/search", params={"userName": "ann", "content": "phish"}, headers=headers).json()
    assert [row["id"] for row in legacy] == [anna]


def test_search_date_parsing(client):
    headers = _login(client)
    _session_with_chat(client, "Anna", "hello")

    ok = client.get("/search", params={"dateFrom": "2000-01-01", "dateTo": "2999-12-31T23:59:59Z"}, headers=headers)
    assert ok.status_code == 200
    assert len(ok.json()) == 1

    future = client.get("/search", params={"dateFrom": "2999-01-01"}, headers=headers)
    assert future.json() == []

    bad = client.get("/search", params={"dateFrom": "last tuesday"}, headers=headers)
    assert bad.status_code == 400
    assert bad.json()["error"] == "ValidationError"


def test_token_expires_after_eight_hours(client, token_clock):
    headers = _login(client)
    assert client.get("/sessions", headers=headers).status_code == 200

    token_clock.advance(8 * 60 * 60 - 1)
    assert client.get("/sessions", headers=headers).status_code == 200

    token_clock.advance(2)
    resp = client.get("/sessions", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["error"] == "Unauthorized"
