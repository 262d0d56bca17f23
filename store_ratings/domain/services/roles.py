"""Role store: one role per identity, first identity becomes administrator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.exc import IntegrityError

from store_ratings.core.auth import Role
from store_ratings.domain.errors import Conflict, NotFound
from store_ratings.domain.models import Actor
from store_ratings.domain.policy import Operation, Target, ensure_allowed
from store_ratings.domain.validation import clean_address, clean_email, clean_name
from store_ratings.infrastructure.db.models import UserModel
from store_ratings.infrastructure.repositories.unit_of_work import UnitOfWork

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class ProfileInput:
    """Optional profile details known when an identity first signs in."""

    full_name: str | None = None
    email: str | None = None
    address: str | None = None

    def cleaned(self) -> ProfileInput:
        return ProfileInput(
            full_name=clean_name(self.full_name, field="full_name")
            if self.full_name is not None
            else None,
            email=clean_email(self.email) if self.email else None,
            address=clean_address(self.address) if self.address is not None else None,
        )


class RoleService:
    """Reads and assigns roles."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_role(self, user_id: str) -> Role | None:
        async with UnitOfWork(self.session) as uow:
            return await uow.roles.get(user_id)

    async def get_role_for(self, actor: Actor, user_id: str) -> Role | None:
        """Policy-checked read of ``user_id``'s role."""
        ensure_allowed(actor, Operation.READ_OWN_ROLE, Target(owner_id=user_id))
        return await self.get_role(user_id)

    async def assign_role(self, actor: Actor, user_id: str, role: Role) -> Role:
        """Explicitly assign ``role`` (administrators only, first assignment wins)."""
        ensure_allowed(actor, Operation.ASSIGN_ROLE)

        try:
            async with UnitOfWork(self.session) as uow:
                if await uow.users.get(user_id) is None:
                    raise NotFound(f"User {user_id} not found", field="user_id")
                existing = await uow.roles.get(user_id)
                if existing is not None:
                    raise Conflict(
                        f"User {user_id} already has role '{existing.value}'", field="role"
                    )
                uow.roles.add(user_id, role)
        except IntegrityError as exc:
            raise Conflict(f"User {user_id} already has a role", field="role") from exc

        logger.info("role_assigned", user_id=user_id, role=role.value, admin_user=actor.user_id)
        return role

    async def bootstrap_or_default(
        self, user_id: str, profile: ProfileInput | None = None
    ) -> Role:
        """Return the caller's role, assigning one on first sight.

        The first identity ever bootstrapped becomes ``system_administrator``;
        every later one becomes ``normal_user``. Concurrent first logins race on
        the ``role_bootstrap`` primary key, so only one of them can win.
        """
        details = (profile or ProfileInput()).cleaned()

        existing = await self.get_role(user_id)
        if existing is not None:
            return existing

        async with UnitOfWork(self.session) as uow:
            await self._ensure_user(uow, user_id, details)

        role = await self._try_claim_admin(user_id)
        if role is None:
            role = await self._assign_default(user_id)

        logger.info("role_bootstrapped", user_id=user_id, role=role.value)
        return role

    async def _ensure_user(self, uow: UnitOfWork, user_id: str, details: ProfileInput) -> None:
        user = await uow.users.get(user_id)
        if user is None:
            uow.users.add(
                UserModel(
                    id=user_id,
                    full_name=details.full_name,
                    email=details.email,
                    address=details.address,
                )
            )
            try:
                await uow.flush()
            except IntegrityError:
                # Created by a concurrent bootstrap of the same identity
                await uow.rollback()
            return

        if details.full_name and not user.full_name:
            user.full_name = details.full_name
        if details.email and not user.email:
            user.email = details.email
        if details.address and not user.address:
            user.address = details.address

    async def _try_claim_admin(self, user_id: str) -> Role | None:
        async with UnitOfWork(self.session) as uow:
            if await uow.roles.any_assigned():
                return None

        try:
            async with UnitOfWork(self.session) as uow:
                uow.roles.claim_admin_bootstrap(user_id)
                uow.roles.add(user_id, Role.SYSTEM_ADMINISTRATOR)
        except IntegrityError:
            logger.info("role_bootstrap_admin_taken", user_id=user_id)
            return None
        return Role.SYSTEM_ADMINISTRATOR

    async def _assign_default(self, user_id: str) -> Role:
        try:
            async with UnitOfWork(self.session) as uow:
                uow.roles.add(user_id, Role.NORMAL_USER)
        except IntegrityError:
            # Same identity bootstrapped concurrently; keep whichever role committed
            existing = await self.get_role(user_id)
            if existing is None:
                raise
            return existing
        return Role.NORMAL_USER
