from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from store_ratings.api.deps import get_current_actor, get_db_session
from store_ratings.api.schemas.ratings import MyRatingResponse, RatingResponse, RatingSubmit
from store_ratings.domain import Actor
from store_ratings.domain.services import RatingService, StoreService
from store_ratings.infrastructure.db.models import Rating

router = APIRouter(prefix="/ratings", tags=["Ratings"])


def _to_response(rating: Rating) -> RatingResponse:
    return RatingResponse(
        id=rating.id,
        user_id=rating.user_id,
        store_id=rating.store_id,
        rating=rating.rating,
        created_at=rating.created_at,
        updated_at=rating.updated_at,
    )


@router.post("", response_model=RatingResponse)
async def submit_rating(
    payload: RatingSubmit,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> RatingResponse:
    """Create or overwrite the caller's rating and return the refreshed store aggregate."""
    rating = await RatingService(session).submit_rating(
        actor, store_id=payload.store_id, value=payload.value
    )
    store = await StoreService(session).get_store(actor, payload.store_id)

    response = _to_response(rating)
    response.store_average_rating = float(store.average_rating)
    response.store_total_ratings = store.total_ratings
    return response


@router.get("/mine", response_model=MyRatingResponse | list[RatingResponse])
async def my_ratings(
    store_id: str | None = Query(None, description="Limit to one store"),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> MyRatingResponse | list[RatingResponse]:
    """The caller's rating for one store, or all of the caller's ratings."""
    service = RatingService(session)
    if store_id is not None:
        value = await service.get_user_rating(actor, user_id=actor.user_id, store_id=store_id)
        return MyRatingResponse(store_id=store_id, rating=value)

    ratings = await service.list_user_ratings(actor, user_id=actor.user_id)
    return [_to_response(rating) for rating in ratings]


@router.delete("/{rating_id}", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
async def delete_rating(
    rating_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> None:
    """Remove a rating and recompute its store (administrator only)."""
    await RatingService(session).delete_rating(actor, rating_id=rating_id)
