from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from store_ratings.api.deps import get_current_actor, get_db_session, get_identity
from store_ratings.api.schemas.roles import AssignRoleRequest, BootstrapRequest, RoleResponse
from store_ratings.domain import Actor
from store_ratings.domain.errors import Forbidden
from store_ratings.domain.services import ProfileInput, RoleService

router = APIRouter(prefix="/roles", tags=["Roles"])


@router.post("/bootstrap", response_model=RoleResponse)
async def bootstrap_role(
    payload: BootstrapRequest | None = None,
    identity: Actor = Depends(get_identity),
    session: AsyncSession = Depends(get_db_session),
) -> RoleResponse:
    """Assign the caller a role on first sign-in (first identity ever becomes administrator)."""
    payload = payload or BootstrapRequest()
    if payload.user_id is not None and payload.user_id != identity.user_id:
        raise Forbidden("Cannot bootstrap a role for another identity", field="user_id")

    role = await RoleService(session).bootstrap_or_default(
        identity.user_id,
        ProfileInput(
            full_name=payload.full_name,
            email=payload.email or identity.email or None,
            address=payload.address,
        ),
    )
    return RoleResponse(user_id=identity.user_id, role=role)


@router.get("/me", response_model=RoleResponse)
async def my_role(identity: Actor = Depends(get_identity)) -> RoleResponse:
    """Return the caller's role, or null before bootstrap."""
    return RoleResponse(user_id=identity.user_id, role=identity.role)


@router.get("/{user_id}", response_model=RoleResponse)
async def get_role(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> RoleResponse:
    role = await RoleService(session).get_role_for(actor, user_id)
    return RoleResponse(user_id=user_id, role=role)


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def assign_role(
    payload: AssignRoleRequest,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> RoleResponse:
    """Explicitly assign a role (administrator only)."""
    role = await RoleService(session).assign_role(actor, payload.user_id, payload.role)
    return RoleResponse(user_id=payload.user_id, role=role)
