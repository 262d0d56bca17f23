from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

import jwt

from store_ratings.core.config import get_settings

# Width of users.id; longer subjects cannot be stored
SUBJECT_MAX_LENGTH = 64


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


class Role(str, Enum):
    SYSTEM_ADMINISTRATOR = "system_administrator"
    NORMAL_USER = "normal_user"
    STORE_OWNER = "store_owner"


def create_access_token(
    subject: str,
    *,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a token the way the identity provider does.

    Roles are never carried in the token; they live in the role store.
    Used by tests and smoke scripts.
    """
    settings = get_settings()

    now = datetime.now(UTC)
    ttl = expires_delta or timedelta(seconds=settings.access_token_ttl_seconds)
    payload: dict[str, Any] = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    if settings.jwt_issuer:
        payload["iss"] = settings.jwt_issuer
    if settings.jwt_audience:
        payload["aud"] = settings.jwt_audience
    if email:
        payload["email"] = email

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an identity provider access token."""
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            options={"require": ["sub", "exp"]},
        )
    except jwt.PyJWTError as exc:  # pragma: no cover - third-party raises numerous subclasses
        raise TokenError("Invalid token") from exc

    subject = str(payload.get("sub") or "")
    if not subject.strip():
        raise TokenError("Token missing subject")
    if len(subject) > SUBJECT_MAX_LENGTH:
        raise TokenError("Token subject too long")
    return payload
