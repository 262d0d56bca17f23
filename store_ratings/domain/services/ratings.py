"""Rating ledger: one rating per (user, store), aggregates kept in step."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy.exc import IntegrityError

from store_ratings.domain.errors import NotFound
from store_ratings.domain.models import Actor, RatingEntry
from store_ratings.domain.policy import Operation, Target, ensure_allowed
from store_ratings.domain.services.aggregation import AggregationEngine
from store_ratings.domain.validation import clean_rating
from store_ratings.infrastructure.db.models import Rating, Store, utcnow
from store_ratings.infrastructure.repositories.unit_of_work import UnitOfWork

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger(__name__)


class RatingService:
    """Writes and reads rating rows."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def submit_rating(self, actor: Actor, *, store_id: str, value: object) -> Rating:
        """Create or overwrite the actor's rating for ``store_id``.

        The store row is locked first so concurrent submissions to the same
        store serialize, then the rating is upserted and the store aggregates
        are recomputed before the single commit.
        """
        ensure_allowed(actor, Operation.SUBMIT_RATING, Target(owner_id=actor.user_id))
        rating_value = clean_rating(value)

        try:
            rating, store, created = await self._upsert(actor.user_id, store_id, rating_value)
        except IntegrityError:
            # Lost an insert race on (user_id, store_id); the row exists now
            logger.warning("rating_upsert_retry", user_id=actor.user_id, store_id=store_id)
            rating, store, created = await self._upsert(actor.user_id, store_id, rating_value)

        logger.info(
            "rating_submitted",
            user_id=actor.user_id,
            store_id=store_id,
            rating=rating_value,
            created=created,
            total_ratings=store.total_ratings,
            average_rating=str(store.average_rating),
        )
        return rating

    async def _upsert(self, user_id: str, store_id: str, value: int) -> tuple[Rating, Store, bool]:
        async with UnitOfWork(self.session) as uow:
            store = await uow.stores.get_for_update(store_id)
            if store is None:
                raise NotFound(f"Store {store_id} not found", field="store_id")

            rating = await uow.ratings.get(user_id, store_id)
            created = rating is None
            if rating is None:
                rating = Rating(user_id=user_id, store_id=store_id, rating=value)
                uow.ratings.add(rating)
            else:
                rating.rating = value
                rating.updated_at = utcnow()
            await uow.flush()

            await AggregationEngine(uow).recompute(store)
        return rating, store, created

    async def get_user_rating(self, actor: Actor, *, user_id: str, store_id: str) -> int | None:
        ensure_allowed(actor, Operation.READ_OWN_RATINGS, Target(owner_id=user_id))
        async with UnitOfWork(self.session) as uow:
            rating = await uow.ratings.get(user_id, store_id)
        return rating.rating if rating is not None else None

    async def list_user_ratings(self, actor: Actor, *, user_id: str) -> Sequence[Rating]:
        ensure_allowed(actor, Operation.READ_OWN_RATINGS, Target(owner_id=user_id))
        async with UnitOfWork(self.session) as uow:
            return await uow.ratings.list_for_user(user_id)

    async def list_ratings_for_store(self, actor: Actor, *, store_id: str) -> list[RatingEntry]:
        """Ratings of one store, newest first, for its owner or an administrator."""
        async with UnitOfWork(self.session) as uow:
            store = await uow.stores.get(store_id)
            if store is None:
                raise NotFound(f"Store {store_id} not found", field="store_id")
            ensure_allowed(actor, Operation.LIST_STORE_RATINGS, Target(owner_id=store.owner_id))
            rows = await uow.ratings.list_for_store(store_id)

        return [
            RatingEntry(
                id=rating.id,
                user_id=rating.user_id,
                store_id=rating.store_id,
                rating=rating.rating,
                user_name=user_name,
                created_at=rating.created_at,
                updated_at=rating.updated_at,
            )
            for rating, user_name in rows
        ]

    async def delete_rating(self, actor: Actor, *, rating_id: str) -> None:
        ensure_allowed(actor, Operation.DELETE_RATING)

        async with UnitOfWork(self.session) as uow:
            rating = await uow.ratings.get_by_id(rating_id)
            if rating is None:
                raise NotFound(f"Rating {rating_id} not found", field="rating_id")
            store_id = rating.store_id
            store = await uow.stores.get_for_update(store_id)
            await uow.ratings.delete(rating)
            await uow.flush()
            if store is not None:
                await AggregationEngine(uow).recompute(store)

        logger.info(
            "rating_deleted",
            rating_id=rating_id,
            store_id=store_id,
            admin_user=actor.user_id,
        )
