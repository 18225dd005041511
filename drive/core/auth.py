# drive/core/auth.py
from __future__ import annotations

from fastapi import Header, Query

from drive.core.errors import AuthenticationRequired, InvalidFileToken, InvalidToken
from drive.core.security import TokenClaims, decode_access_token


def bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def require_auth(authorization: str | None = Header(None)) -> TokenClaims:
    # no token -> 401, bad signature or expired -> 403
    token = bearer_token(authorization)
    if token is None:
        raise AuthenticationRequired()
    return decode_access_token(token)


async def require_file_access(
    authorization: str | None = Header(None),
    token: str | None = Query(None),
) -> TokenClaims:
    # <img src> and plain links cannot send headers, so ?token= is the fallback
    raw = bearer_token(authorization) or token
    if not raw:
        raise AuthenticationRequired()
    try:
        return decode_access_token(raw)
    except InvalidToken as exc:
        raise InvalidFileToken() from exc
