from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from cyberguard.models import ChatSession, Message
from cyberguard.services.log_search_service import SearchFilter, search_logs

BASE = datetime(2026, 2, 10, 9, 0, tzinfo=UTC)


@pytest.fixture()
def seeded(db_session):
    """
    anna:    Anna,   day 0, mentions phishing
    joanne:  Joanne, day 1, talks about passwords
    bob:     Bob,    day 2, mentions phishing
    empty:   Annabel, day 3, no messages
    """
    rows = {
        "anna": ChatSession(identity_label="Anna", created_at=BASE),
        "joanne": ChatSession(identity_label="Joanne", created_at=BASE + timedelta(days=1)),
        "bob": ChatSession(identity_label="Bob", created_at=BASE + timedelta(days=2)),
        "empty": ChatSession(identity_label="Annabel", created_at=BASE + timedelta(days=3)),
    }
    db_session.add_all(rows.values())
    db_session.commit()

    transcript = {
        "anna": [("user", "I got a Phishing email"), ("assistant", "Do not click the link")],
        "joanne": [("user", "How long should a password be?"), ("assistant", "At least 12 characters")],
        "bob": [("user", "what is spear-phishing?"), ("assistant", "Targeted phishing")],
    }
    for key, turns in transcript.items():
        for offset, (role, content) in enumerate(turns):
            db_session.add(
                Message(
                    session_id=rows[key].id,
                    role=role,
                    content=content,
                    created_at=rows[key].created_at + timedelta(minutes=offset),
                )
            )
    db_session.commit()
    return rows


def _ids(results):
    return [row.id for row in results]


def test_empty_filter_returns_all_sessions_newest_first(db_session, seeded):
    results = search_logs(db_session, SearchFilter())
    assert _ids(results) == [seeded[k].id for k in ("empty", "bob", "joanne", "anna")]


def test_identity_is_case_insensitive_substring(db_session, seeded):
    results = search_logs(db_session, SearchFilter(identity="ann"))
    assert _ids(results) == [seeded["empty"].id, seeded["joanne"].id, seeded["anna"].id]


def test_identity_and_content_are_combined_with_and(db_session, seeded):
    results = search_logs(db_session, SearchFilter(identity="ann", content="phish"))
    assert _ids(results) == [seeded["anna"].id]


def test_content_match_returns_full_transcript(db_session, seeded):
    results = search_logs(db_session, SearchFilter(content="PHISH"))
    assert _ids(results) == [seeded["bob"].id, seeded["anna"].id]

    anna = results[1]
    assert anna.identity_label == "Anna"
    assert anna.message_count == 2
    assert [(m.role, m.content) for m in anna.messages] == [
        ("user", "I got a Phishing email"),
        ("assistant", "Do not click the link"),
    ]


def test_sessions_without_messages_have_empty_transcripts(db_session, seeded):
    results = search_logs(db_session, SearchFilter(identity="annabel"))
    assert len(results) == 1
    assert results[0].messages == []
    assert results[0].message_count == 0


def test_date_bounds_are_inclusive(db_session, seeded):
    results = search_logs(
        db_session,
        SearchFilter(date_from=BASE + timedelta(days=1), date_to=BASE + timedelta(days=2)),
    )
    assert _ids(results) == [seeded["bob"].id, seeded["joanne"].id]


def test_naive_and_offset_dates_are_normalised_to_utc(db_session, seeded):
    bangkok = timezone(timedelta(hours=7))
    search = SearchFilter(
        date_from=datetime(2026, 2, 11, 16, 0, tzinfo=bangkok),
        date_to=datetime(2026, 2, 11, 9, 0),
    )
    assert search.date_from == BASE + timedelta(days=1)
    assert search.date_to.tzinfo is not None

    assert _ids(search_logs(db_session, search)) == [seeded["joanne"].id]


def test_blank_terms_are_ignored(db_session, seeded):
    search = SearchFilter(identity="   ", content="")
    assert search.identity is None and search.content is None
    assert len(search_logs(db_session, search)) == 4


def test_like_wildcards_are_matched_literally(db_session, seeded):
    assert search_logs(db_session, SearchFilter(content="%")) == []
    assert search_logs(db_session, SearchFilter(identity="_")) == []


def test_limit_caps_result_rows(db_session, seeded):
    results = search_logs(db_session, SearchFilter(), limit=2)
    assert _ids(results) == [seeded["empty"].id, seeded["bob"].id]
