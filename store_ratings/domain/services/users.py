"""User directory used by the administrator dashboard."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy.exc import IntegrityError

from store_ratings.core.auth import SUBJECT_MAX_LENGTH, Role
from store_ratings.domain.errors import Conflict, NotFound, ValidationError
from store_ratings.domain.models import Actor, DashboardStats
from store_ratings.domain.policy import Operation, Target, ensure_allowed
from store_ratings.domain.validation import clean_address, clean_email, clean_name
from store_ratings.infrastructure.db.models import UserModel
from store_ratings.infrastructure.repositories.unit_of_work import UnitOfWork

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger(__name__)


class UserService:
    """Provisioning and lookup of user profiles."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_user(
        self,
        actor: Actor,
        *,
        user_id: str,
        full_name: str,
        email: str,
        address: str,
        role: Role,
    ) -> tuple[UserModel, Role]:
        """Provision a profile and its single role for an identity-provider account."""
        ensure_allowed(actor, Operation.MANAGE_USERS)

        user_id = (user_id or "").strip()
        if not user_id:
            raise ValidationError("user_id is required", field="user_id")
        if len(user_id) > SUBJECT_MAX_LENGTH:
            raise ValidationError(
                f"user_id must be at most {SUBJECT_MAX_LENGTH} characters", field="user_id"
            )
        user = UserModel(
            id=user_id,
            full_name=clean_name(full_name, field="full_name"),
            email=clean_email(email),
            address=clean_address(address),
        )

        try:
            async with UnitOfWork(self.session) as uow:
                if await uow.users.get(user_id) is not None:
                    raise Conflict(f"User {user_id} already exists", field="user_id")
                uow.users.add(user)
                await uow.flush()
                uow.roles.add(user_id, role)
        except IntegrityError as exc:
            raise Conflict(f"User {user_id} already exists", field="user_id") from exc

        logger.info("user_created", user_id=user_id, role=role.value, admin_user=actor.user_id)
        return user, role

    async def get_user(self, actor: Actor, user_id: str) -> tuple[UserModel, Role | None]:
        ensure_allowed(actor, Operation.READ_USER, Target(owner_id=user_id))
        async with UnitOfWork(self.session) as uow:
            user = await uow.users.get(user_id)
            if user is None:
                raise NotFound(f"User {user_id} not found", field="user_id")
            role = await uow.roles.get(user_id)
        return user, role

    async def list_users(
        self,
        actor: Actor,
        *,
        name: str | None = None,
        email: str | None = None,
        address: str | None = None,
        role: Role | None = None,
    ) -> Sequence[tuple[UserModel, Role | None]]:
        ensure_allowed(actor, Operation.MANAGE_USERS)
        async with UnitOfWork(self.session) as uow:
            return await uow.users.list_with_roles(
                name=name, email=email, address=address, role=role
            )

    async def list_store_owners(self, actor: Actor) -> Sequence[tuple[UserModel, Role | None]]:
        return await self.list_users(actor, role=Role.STORE_OWNER)

    async def dashboard_stats(self, actor: Actor) -> DashboardStats:
        ensure_allowed(actor, Operation.READ_STATS)
        async with UnitOfWork(self.session) as uow:
            return DashboardStats(
                users=await uow.users.count(),
                stores=await uow.stores.count(),
                ratings=await uow.ratings.count(),
            )
