from fastapi import Depends, Header

from cyberguard.deps import get_token_store
from cyberguard.errors import Unauthorized
from cyberguard.services.admin_token_service import AdminTokenStore


def _bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise Unauthorized("Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise Unauthorized("Invalid Authorization header, expected 'Bearer <token>'")
    return token


async def require_admin(
    authorization: str | None = Header(default=None),
    store: AdminTokenStore = Depends(get_token_store),
) -> str:
    """
    Guard for admin-only routes.

    Accepts `Authorization: Bearer <token>` where the token was issued by
    POST /admin/login and has not outlived ADMIN_TOKEN_TTL_SECONDS.
    """
    token = _bearer_token(authorization)
    if not store.is_valid(token):
        raise Unauthorized("Invalid or expired token")
    return token


__all__ = ["require_admin"]
