from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from store_ratings.core.auth import TokenError, create_access_token, decode_access_token
from store_ratings.domain import Actor
from store_ratings.domain.services import RoleService
from store_ratings.infrastructure.db.session import get_session

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Provide an async SQLAlchemy session for API handlers."""
    async for session in get_session():
        yield session


async def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> Actor:
    """Resolve the caller from the identity provider token.

    The role comes from the role store, never from the token, and is ``None``
    for identities that have not been bootstrapped yet.
    """
    if credentials is None:
        raise _unauthorized("Missing bearer token")

    try:
        payload = decode_access_token(credentials.credentials)
    except TokenError as exc:
        raise _unauthorized(str(exc)) from exc

    user_id = str(payload["sub"])
    role = await RoleService(session).get_role(user_id)
    return Actor(user_id=user_id, role=role, email=payload.get("email", ""))


async def get_current_actor(actor: Actor = Depends(get_identity)) -> Actor:  # noqa: B008
    """Like ``get_identity`` but rejects identities without a role."""
    if actor.role is None:
        raise _forbidden("No role assigned; call POST /roles/bootstrap first")
    return actor


def issue_smoke_token(user_id: str, *, email: str | None = None) -> str:
    """Generate a signed token for manual smoke testing."""
    return create_access_token(user_id, email=email)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
