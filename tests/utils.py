from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from store_ratings.api.deps import issue_smoke_token
from store_ratings.core.auth import Role
from store_ratings.domain import Actor
from store_ratings.infrastructure.db.models import (
    ADMIN_BOOTSTRAP_SLOT,
    RoleBootstrap,
    Store,
    UserModel,
    UserRoleModel,
)

STORE_NAME = "Corner Grocery And Deli"
STORE_EMAIL = "hello@cornergrocery.com"
STORE_ADDRESS = "12 Market Street, Springfield"


def auth_headers(user_id: str, email: str | None = None) -> dict[str, str]:
    token = issue_smoke_token(user_id, email=email)
    return {"Authorization": f"Bearer {token}"}


def profile_name(label: str) -> str:
    """A display name that satisfies the 20-60 character rule."""
    return f"{label} Testperson".ljust(20, "x")[:60]


@dataclass
class SeededWorld:
    admin: Actor
    owner: Actor
    rater: Actor
    other_rater: Actor
    store_id: str


async def seed_user(
    session: AsyncSession,
    user_id: str,
    role: Role | None,
    *,
    full_name: str | None = None,
    email: str | None = None,
    address: str | None = "1 Test Street",
) -> Actor:
    session.add(
        UserModel(
            id=user_id,
            full_name=full_name or profile_name(user_id),
            email=email or f"{user_id}@ratings-test.com",
            address=address,
        )
    )
    await session.flush()
    if role is not None:
        session.add(UserRoleModel(user_id=user_id, role=role))
    await session.commit()
    return Actor(user_id=user_id, role=role)


async def seed_store(
    session: AsyncSession,
    owner_id: str,
    *,
    name: str = STORE_NAME,
    email: str = STORE_EMAIL,
    address: str = STORE_ADDRESS,
) -> Store:
    store = Store(name=name, email=email, address=address, owner_id=owner_id)
    session.add(store)
    await session.commit()
    return store


async def seed_world(session: AsyncSession) -> SeededWorld:
    admin = await seed_user(session, "admin-1", Role.SYSTEM_ADMINISTRATOR)
    session.add(RoleBootstrap(slot=ADMIN_BOOTSTRAP_SLOT, user_id=admin.user_id))
    await session.commit()

    owner = await seed_user(session, "owner-1", Role.STORE_OWNER)
    rater = await seed_user(
        session, "rater-1", Role.NORMAL_USER, full_name="Rosalind Ratingsworth"
    )
    other_rater = await seed_user(session, "rater-2", Role.NORMAL_USER)
    store = await seed_store(session, owner.user_id)
    return SeededWorld(
        admin=admin,
        owner=owner,
        rater=rater,
        other_rater=other_rater,
        store_id=store.id,
    )
