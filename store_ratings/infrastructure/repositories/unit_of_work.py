from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from store_ratings.core.auth import Role
from store_ratings.infrastructure.db.models import (
    ADMIN_BOOTSTRAP_SLOT,
    Rating,
    RoleBootstrap,
    Store,
    UserModel,
    UserRoleModel,
    utcnow,
)

logger = structlog.get_logger()


def _icontains(column, term: str | None):
    if not term:
        return None
    return func.lower(column).contains(term.lower(), autoescape=True)


@dataclass
class UserRepository:
    session: AsyncSession

    async def get(self, user_id: str) -> UserModel | None:
        return await self.session.get(UserModel, user_id)

    def add(self, user: UserModel) -> None:
        self.session.add(user)

    async def count(self) -> int:
        return int(await self.session.scalar(select(func.count(UserModel.id))) or 0)

    async def list_with_roles(
        self,
        *,
        name: str | None = None,
        email: str | None = None,
        address: str | None = None,
        role: Role | None = None,
    ) -> Sequence[tuple[UserModel, Role | None]]:
        stmt = (
            select(UserModel, UserRoleModel.role)
            .outerjoin(UserRoleModel, UserRoleModel.user_id == UserModel.id)
            .order_by(UserModel.full_name, UserModel.id)
        )
        for clause in (
            _icontains(UserModel.full_name, name),
            _icontains(UserModel.email, email),
            _icontains(UserModel.address, address),
        ):
            if clause is not None:
                stmt = stmt.where(clause)
        if role is not None:
            stmt = stmt.where(UserRoleModel.role == role)
        rows = (await self.session.execute(stmt)).all()
        return [(user, user_role) for user, user_role in rows]


@dataclass
class RoleRepository:
    session: AsyncSession

    async def get(self, user_id: str) -> Role | None:
        stmt = select(UserRoleModel.role).where(UserRoleModel.user_id == user_id).limit(1)
        return await self.session.scalar(stmt)

    def add(self, user_id: str, role: Role) -> UserRoleModel:
        assignment = UserRoleModel(user_id=user_id, role=role)
        self.session.add(assignment)
        return assignment

    async def any_assigned(self) -> bool:
        stmt = select(UserRoleModel.id).limit(1)
        return (await self.session.scalar(stmt)) is not None

    def claim_admin_bootstrap(self, user_id: str) -> None:
        """Stage the sentinel insert; flushing it fails if another user already claimed it."""
        self.session.add(RoleBootstrap(slot=ADMIN_BOOTSTRAP_SLOT, user_id=user_id))


@dataclass
class StoreRepository:
    session: AsyncSession

    async def get(self, store_id: str) -> Store | None:
        return await self.session.get(Store, store_id)

    async def get_for_update(self, store_id: str) -> Store | None:
        """Load the store with a row lock; rating writes to one store serialize here."""
        stmt = (
            select(Store)
            .where(Store.id == store_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return await self.session.scalar(stmt)

    async def get_by_owner(self, owner_id: str) -> Store | None:
        stmt = select(Store).where(Store.owner_id == owner_id).limit(1)
        return await self.session.scalar(stmt)

    async def search(
        self,
        *,
        name: str | None = None,
        address: str | None = None,
        email: str | None = None,
    ) -> Sequence[Store]:
        stmt = select(Store).order_by(Store.name.asc(), Store.id)
        for clause in (
            _icontains(Store.name, name),
            _icontains(Store.address, address),
            _icontains(Store.email, email),
        ):
            if clause is not None:
                stmt = stmt.where(clause)
        return (await self.session.scalars(stmt)).all()

    def add(self, store: Store) -> None:
        self.session.add(store)

    async def delete(self, store: Store) -> None:
        await self.session.execute(delete(Rating).where(Rating.store_id == store.id))
        await self.session.delete(store)

    async def count(self) -> int:
        return int(await self.session.scalar(select(func.count(Store.id))) or 0)

    def set_aggregates(self, store: Store, *, average: Decimal, total: int) -> None:
        store.average_rating = average
        store.total_ratings = total
        store.updated_at = utcnow()


@dataclass
class RatingRepository:
    session: AsyncSession

    async def get(self, user_id: str, store_id: str) -> Rating | None:
        stmt = select(Rating).where(Rating.user_id == user_id, Rating.store_id == store_id)
        return await self.session.scalar(stmt)

    async def get_by_id(self, rating_id: str) -> Rating | None:
        return await self.session.get(Rating, rating_id)

    def add(self, rating: Rating) -> None:
        self.session.add(rating)

    async def delete(self, rating: Rating) -> None:
        await self.session.delete(rating)

    async def totals_for_store(self, store_id: str) -> tuple[int, int]:
        """Return ``(count, sum)`` of rating values currently stored for ``store_id``."""
        stmt = select(func.count(Rating.id), func.coalesce(func.sum(Rating.rating), 0)).where(
            Rating.store_id == store_id
        )
        count, total = (await self.session.execute(stmt)).one()
        return int(count), int(total)

    async def list_for_store(self, store_id: str) -> Sequence[tuple[Rating, str | None]]:
        stmt = (
            select(Rating, UserModel.full_name)
            .outerjoin(UserModel, UserModel.id == Rating.user_id)
            .where(Rating.store_id == store_id)
            .order_by(Rating.created_at.desc(), Rating.id)
        )
        rows = (await self.session.execute(stmt)).all()
        return [(rating, user_name) for rating, user_name in rows]

    async def list_for_user(self, user_id: str) -> Sequence[Rating]:
        stmt = select(Rating).where(Rating.user_id == user_id).order_by(Rating.created_at.desc())
        return (await self.session.scalars(stmt)).all()

    async def count(self) -> int:
        return int(await self.session.scalar(select(func.count(Rating.id))) or 0)


class UnitOfWork:
    """Groups the repositories over one session and one transaction.

    Leaving the ``async with`` block commits; any exception rolls back and
    propagates.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.users = UserRepository(session)
        self.roles = RoleRepository(session)
        self.stores = StoreRepository(session)
        self.ratings = RatingRepository(session)

    async def __aenter__(self) -> UnitOfWork:
        logger.debug("uow_enter")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc:
            await self.rollback()
        else:
            try:
                await self.commit()
            except Exception:
                await self.rollback()
                raise
        logger.debug("uow_exit", exc_type=str(exc_type) if exc_type else None)

    async def flush(self) -> None:
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()
        logger.debug("uow_commit")

    async def rollback(self) -> None:
        await self.session.rollback()
        logger.debug("uow_rollback")
