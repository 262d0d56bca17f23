"""Aggregation engine: keeps a store's average/count equal to its rating rows.

``recompute`` is called from inside the unit of work that wrote the rating, so
the aggregate update commits or rolls back together with that write.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from store_ratings.infrastructure.db.models import Store
    from store_ratings.infrastructure.repositories.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)

ZERO_AVERAGE = Decimal("0.0")
_ONE_PLACE = Decimal("0.1")


def average_rating(count: int, total: int) -> Decimal:
    """Mean of ``count`` ratings summing to ``total``, rounded half-up to one decimal."""
    if count <= 0:
        return ZERO_AVERAGE
    return (Decimal(total) / Decimal(count)).quantize(_ONE_PLACE, rounding=ROUND_HALF_UP)


class AggregationEngine:
    """Recomputes derived rating fields from the ledger."""

    def __init__(self, uow: UnitOfWork) -> None:
        self.uow = uow

    async def recompute(self, store: Store) -> Store:
        count, total = await self.uow.ratings.totals_for_store(store.id)
        average = average_rating(count, total)
        self.uow.stores.set_aggregates(store, average=average, total=count)
        await self.uow.flush()

        logger.info(
            "store_aggregates_recomputed",
            store_id=store.id,
            total_ratings=count,
            average_rating=str(average),
        )
        return store
