from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from store_ratings.api.deps import get_current_actor, get_db_session
from store_ratings.api.schemas.users import UserCreate, UserResponse
from store_ratings.core.auth import Role
from store_ratings.domain import Actor
from store_ratings.domain.services import UserService
from store_ratings.infrastructure.db.models import UserModel

router = APIRouter(prefix="/users", tags=["Users"])


def _to_response(user: UserModel, role: Role | None) -> UserResponse:
    return UserResponse(
        id=user.id,
        full_name=user.full_name,
        email=user.email,
        address=user.address,
        role=role,
        created_at=user.created_at,
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    """Provision a profile and role for an identity (administrator only)."""
    user, role = await UserService(session).create_user(
        actor,
        user_id=payload.user_id,
        full_name=payload.full_name,
        email=payload.email,
        address=payload.address,
        role=payload.role,
    )
    return _to_response(user, role)


@router.get("", response_model=list[UserResponse])
async def list_users(
    name: str | None = Query(None),
    email: str | None = Query(None),
    address: str | None = Query(None),
    role: Role | None = Query(None),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> list[UserResponse]:
    """Filterable user directory (administrator only)."""
    rows = await UserService(session).list_users(
        actor, name=name, email=email, address=address, role=role
    )
    return [_to_response(user, user_role) for user, user_role in rows]


@router.get("/store-owners", response_model=list[UserResponse])
async def list_store_owners(
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> list[UserResponse]:
    """Candidates for store ownership (administrator only)."""
    rows = await UserService(session).list_store_owners(actor)
    return [_to_response(user, user_role) for user, user_role in rows]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user, role = await UserService(session).get_user(actor, user_id)
    return _to_response(user, role)
