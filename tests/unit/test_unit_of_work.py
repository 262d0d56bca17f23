from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from store_ratings.infrastructure.db.models import UserModel
from store_ratings.infrastructure.repositories.unit_of_work import UnitOfWork


async def test_commits_on_clean_exit(
    db: AsyncSession, session_factory: async_sessionmaker[AsyncSession]
) -> None:
    async with UnitOfWork(db) as uow:
        uow.users.add(UserModel(id="kept"))

    async with session_factory() as other:
        assert await other.get(UserModel, "kept") is not None


async def test_rolls_back_on_error(
    db: AsyncSession, session_factory: async_sessionmaker[AsyncSession]
) -> None:
    with pytest.raises(RuntimeError):
        async with UnitOfWork(db) as uow:
            uow.users.add(UserModel(id="discarded"))
            await uow.flush()
            raise RuntimeError("boom")

    async with session_factory() as other:
        assert await other.get(UserModel, "discarded") is None
    assert await UnitOfWork(db).users.count() == 0
