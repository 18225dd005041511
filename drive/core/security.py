# drive/core/security.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from drive.core.config import Settings, get_settings
from drive.core.errors import InvalidToken


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: str
    is_admin: bool
    expires_at: datetime


# --- passwords ---
def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


# --- bearer tokens ---
def create_access_token(
    user_id: str,
    email: str,
    is_admin: bool = False,
    *,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> str:
    settings = settings or get_settings()
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "is_admin": bool(is_admin),
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=settings.token_expire_hours),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, *, settings: Settings | None = None) -> TokenClaims:
    settings = settings or get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.InvalidTokenError as exc:
        # ExpiredSignatureError is a subclass
        raise InvalidToken() from exc

    return TokenClaims(
        user_id=str(payload["sub"]),
        email=payload.get("email", ""),
        is_admin=bool(payload.get("is_admin", False)),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
