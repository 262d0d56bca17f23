from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from store_ratings.api.deps import get_current_actor, get_db_session
from store_ratings.api.schemas.users import StatsResponse
from store_ratings.domain import Actor
from store_ratings.domain.services import UserService

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/stats", response_model=StatsResponse)
async def dashboard_stats(
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> StatsResponse:
    """Totals of users, stores and ratings for the administrator dashboard."""
    stats = await UserService(session).dashboard_stats(actor)
    return StatsResponse(users=stats.users, stores=stats.stores, ratings=stats.ratings)
