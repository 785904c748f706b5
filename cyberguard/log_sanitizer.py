from __future__ import annotations

from collections.abc import Mapping

REDACTED = "***REDACTED***"


_SENSITIVE_HEADER_NAMES = {
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
}

_SENSITIVE_NAME_FRAGMENTS = ("key", "token", "secret", "auth", "cookie", "session", "pass")


def sanitize_headers_for_log(
    headers: Mapping[str, str], *, mask_token: str = REDACTED
) -> dict[str, str]:
    """
    Return a copy of request headers that is safe to write to logs.

    Admin bearer tokens travel in Authorization, so that header (and any
    header whose name looks credential-like) is masked; everything else is
    kept verbatim for troubleshooting.
    """
    sanitized: dict[str, str] = {}
    for name, value in headers.items():
        lower_name = name.lower()
        if lower_name in _SENSITIVE_HEADER_NAMES or any(
            fragment in lower_name for fragment in _SENSITIVE_NAME_FRAGMENTS
        ):
            sanitized[name] = mask_token
            continue
        sanitized[name] = value
    return sanitized


__all__ = ["REDACTED", "sanitize_headers_for_log"]
