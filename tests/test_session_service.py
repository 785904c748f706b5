from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from cyberguard.errors import CapacityExceeded, ValidationError
from cyberguard.models import ROLE_ASSISTANT, ROLE_USER, ChatSession, Message
from cyberguard.services.conversation_store import append_message, count_messages
from cyberguard.services.session_service import (
    count_active_sessions,
    create_session,
    delete_session,
    list_all_sessions,
    list_sessions_for_identity,
)


def test_fourth_session_for_same_identity_is_refused(db_session):
    created = [create_session(db_session, "Mali") for _ in range(3)]
    assert len({s.id for s in created}) == 3

    with pytest.raises(CapacityExceeded) as excinfo:
        create_session(db_session, "Mali")

    assert excinfo.value.status_code == 403
    assert excinfo.value.details == {"identityLabel": "Mali", "activeSessions": 3, "maxSessions": 3}
    assert count_active_sessions(db_session, "Mali") == 3


def test_capacity_is_counted_per_identity(db_session):
    for _ in range(3):
        create_session(db_session, "Mali")

    other = create_session(db_session, "Somchai")
    assert other.identity_label == "Somchai"
    # Labels are compared exactly.
    assert create_session(db_session, "mali").identity_label == "mali"


def test_identity_label_is_trimmed_and_validated(db_session):
    session = create_session(db_session, "  Mali  ")
    assert session.identity_label == "Mali"

    with pytest.raises(ValidationError):
        create_session(db_session, "   ")
    with pytest.raises(ValidationError):
        create_session(db_session, None)
    with pytest.raises(ValidationError):
        create_session(db_session, "x" * 101)


def test_deleting_a_session_frees_capacity_and_removes_messages(db_session):
    sessions = [create_session(db_session, "Mali") for _ in range(3)]
    target = sessions[0]
    append_message(db_session, session_id=target.id, role=ROLE_USER, content="hello")
    append_message(db_session, session_id=target.id, role=ROLE_ASSISTANT, content="hi there")

    assert delete_session(db_session, target.id) is True

    assert db_session.get(ChatSession, target.id) is None
    assert count_messages(db_session, target.id) == 0
    assert db_session.query(Message).count() == 0
    assert count_active_sessions(db_session, "Mali") == 2
    create_session(db_session, "Mali")


def test_delete_unknown_session_returns_false(db_session):
    assert delete_session(db_session, uuid4()) is False


def test_listings_include_message_counts_newest_first(db_session):
    base = datetime(2026, 1, 1, 9, 0, tzinfo=UTC)
    older = ChatSession(identity_label="Anna", created_at=base)
    newer = ChatSession(identity_label="Anna", created_at=base + timedelta(hours=1))
    stranger = ChatSession(identity_label="Bob", created_at=base + timedelta(hours=2))
    db_session.add_all([older, newer, stranger])
    db_session.commit()
    append_message(db_session, session_id=older.id, role=ROLE_USER, content="one")
    append_message(db_session, session_id=older.id, role=ROLE_ASSISTANT, content="two")

    anna = list_sessions_for_identity(db_session, "Anna")
    assert [s.id for s in anna] == [newer.id, older.id]
    assert [s.message_count for s in anna] == [0, 2]

    everyone = list_all_sessions(db_session)
    assert [s.id for s in everyone] == [stranger.id, newer.id, older.id]


def test_session_messages_relationship_follows_history_order(db_session):
    session = create_session(db_session, "Mali")
    base = datetime(2026, 5, 1, 8, 0, tzinfo=UTC)
    db_session.add_all(
        [
            Message(id=10, session_id=session.id, role=ROLE_ASSISTANT, content="later", created_at=base + timedelta(minutes=1)),
            Message(id=11, session_id=session.id, role=ROLE_USER, content="tie-b", created_at=base),
            Message(id=9, session_id=session.id, role=ROLE_USER, content="tie-a", created_at=base),
        ]
    )
    db_session.commit()
    db_session.expire_all()

    reloaded = db_session.get(ChatSession, session.id)
    assert [m.content for m in reloaded.messages] == ["tie-a", "tie-b", "later"]
