from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from store_ratings.api.deps import get_current_actor, get_db_session
from store_ratings.api.schemas.stores import (
    OwnerStoreResponse,
    StoreCreate,
    StoreRatingItem,
    StoreResponse,
    StoreUpdate,
)
from store_ratings.domain import Actor
from store_ratings.domain.services import RatingService, StoreService
from store_ratings.infrastructure.db.models import Store

router = APIRouter(prefix="/stores", tags=["Stores"])


def _to_response(store: Store, my_rating: int | None = None) -> StoreResponse:
    return StoreResponse(
        id=store.id,
        name=store.name,
        email=store.email,
        address=store.address,
        owner_id=store.owner_id,
        average_rating=float(store.average_rating),
        total_ratings=store.total_ratings,
        created_at=store.created_at,
        updated_at=store.updated_at,
        my_rating=my_rating,
    )


@router.get("", response_model=list[StoreResponse])
async def list_stores(
    name: str | None = Query(None, description="Case-insensitive name substring"),
    address: str | None = Query(None, description="Case-insensitive address substring"),
    email: str | None = Query(None, description="Case-insensitive email substring"),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> list[StoreResponse]:
    """Browse stores ordered by name, with the caller's own rating alongside."""
    stores = await StoreService(session).list_stores(
        actor, name_contains=name, address_contains=address, email_contains=email
    )
    own = await RatingService(session).list_user_ratings(actor, user_id=actor.user_id)
    own_by_store = {rating.store_id: rating.rating for rating in own}
    return [_to_response(store, own_by_store.get(store.id)) for store in stores]


@router.post("", response_model=StoreResponse, status_code=status.HTTP_201_CREATED)
async def create_store(
    payload: StoreCreate,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> StoreResponse:
    """Create a store and assign its owner (administrator only)."""
    store = await StoreService(session).create_store(
        actor,
        name=payload.name,
        email=payload.email,
        address=payload.address,
        owner_id=payload.owner_id,
    )
    return _to_response(store)


@router.get("/mine", response_model=OwnerStoreResponse)
async def my_store(
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> OwnerStoreResponse:
    """The calling store owner's store; ``store`` is null when none is assigned."""
    store = await StoreService(session).get_store_for_owner(actor, actor.user_id)
    return OwnerStoreResponse(store=_to_response(store) if store is not None else None)


@router.get("/{store_id}", response_model=StoreResponse)
async def get_store(
    store_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> StoreResponse:
    store = await StoreService(session).get_store(actor, store_id)
    return _to_response(store)


@router.patch("/{store_id}", response_model=StoreResponse)
async def update_store(
    store_id: str,
    payload: StoreUpdate,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> StoreResponse:
    """Edit name, email or address (store owner or administrator)."""
    store = await StoreService(session).update_store_profile(
        actor, store_id, payload.model_dump(exclude_unset=True)
    )
    return _to_response(store)


@router.delete("/{store_id}", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
async def delete_store(
    store_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> None:
    """Remove a store and its ratings (administrator only)."""
    await StoreService(session).delete_store(actor, store_id)


@router.get("/{store_id}/ratings", response_model=list[StoreRatingItem])
async def list_store_ratings(
    store_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
) -> list[StoreRatingItem]:
    """Ratings for one store, newest first (store owner or administrator)."""
    entries = await RatingService(session).list_ratings_for_store(actor, store_id=store_id)
    return [
        StoreRatingItem(
            id=entry.id,
            rating=entry.rating,
            user_id=entry.user_id,
            user_name=entry.user_name,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )
        for entry in entries
    ]
