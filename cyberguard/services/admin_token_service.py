"""
Admin bearer tokens.

Tokens are opaque random strings held in an in-process lease table
(token -> issue time). Validity is computed from the lease on every lookup,
so expiry does not depend on any background timer. Restarting the process
invalidates every token.
"""

from __future__ import annotations

import hmac
import secrets
import time
from typing import Callable

from cyberguard.errors import InvalidCredentials
from cyberguard.logging_config import logger
from cyberguard.settings import settings


class AdminTokenStore:
    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._leases: dict[str, float] = {}

    def issue(self) -> str:
        token = secrets.token_urlsafe(32)
        self._leases[token] = self._clock()
        return token

    def is_valid(self, token: str | None) -> bool:
        if not token:
            return False
        issued_at = self._leases.get(token)
        if issued_at is None:
            return False
        if self._clock() - issued_at < self.ttl_seconds:
            return True
        self._leases.pop(token, None)
        return False

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [t for t, issued_at in self._leases.items() if now - issued_at >= self.ttl_seconds]
        for token in expired:
            self._leases.pop(token, None)
        return len(expired)

    def __len__(self) -> int:
        return len(self._leases)


def _matches(supplied: str, expected: str) -> bool:
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def login(store: AdminTokenStore, username: str, password: str) -> str:
    """Check the configured admin credentials and issue a fresh token."""
    # Both comparisons always run.
    user_ok = _matches(username or "", settings.admin_username)
    pass_ok = _matches(password or "", settings.admin_password)
    if not (user_ok and pass_ok):
        logger.warning("Admin login rejected for username=%r", username)
        raise InvalidCredentials("Invalid credentials")

    store.purge_expired()
    token = store.issue()
    logger.info("Admin login succeeded for username=%r (active tokens=%d)", username, len(store))
    return token


_token_store: AdminTokenStore | None = None


def get_admin_token_store() -> AdminTokenStore:
    """Process-wide token store, created lazily from settings."""
    global _token_store
    if _token_store is None:
        _token_store = AdminTokenStore(ttl_seconds=settings.admin_token_ttl_seconds)
    return _token_store


__all__ = ["AdminTokenStore", "get_admin_token_store", "login"]
