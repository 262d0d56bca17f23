"""Integration tests for rating endpoints."""

from __future__ import annotations

import pytest
from fastapi import status
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from store_ratings.infrastructure.db.models import Rating
from tests.utils import SeededWorld, auth_headers


async def test_submit_returns_refreshed_aggregate(
    async_client: AsyncClient, world: SeededWorld
) -> None:
    first = await async_client.post(
        "/ratings",
        headers=auth_headers(world.rater.user_id),
        json={"store_id": world.store_id, "value": 4},
    )
    second = await async_client.post(
        "/ratings",
        headers=auth_headers(world.other_rater.user_id),
        json={"store_id": world.store_id, "value": 5},
    )

    assert first.status_code == status.HTTP_200_OK
    assert first.json()["rating"] == 4
    assert first.json()["store_average_rating"] == 4.0
    assert second.json()["store_average_rating"] == 4.5
    assert second.json()["store_total_ratings"] == 2


async def test_resubmitting_overwrites(async_client: AsyncClient, world: SeededWorld) -> None:
    headers = auth_headers(world.rater.user_id)
    payload = {"store_id": world.store_id}

    first = await async_client.post("/ratings", headers=headers, json={**payload, "value": 4})
    second = await async_client.post("/ratings", headers=headers, json={**payload, "value": 2})
    mine = await async_client.get(
        "/ratings/mine", params={"store_id": world.store_id}, headers=headers
    )

    assert second.json()["id"] == first.json()["id"]
    assert second.json()["store_total_ratings"] == 1
    assert second.json()["store_average_rating"] == 2.0
    assert mine.json() == {"store_id": world.store_id, "rating": 2}


async def test_out_of_range_value_is_rejected(
    async_client: AsyncClient, world: SeededWorld
) -> None:
    response = await async_client.post(
        "/ratings",
        headers=auth_headers(world.rater.user_id),
        json={"store_id": world.store_id, "value": 6},
    )

    assert response.status_code == 422
    assert response.json() == {
        "code": "validation_error",
        "detail": "rating must be between 1 and 5",
        "field": "rating",
    }


async def test_fractional_value_is_rejected(
    async_client: AsyncClient, world: SeededWorld
) -> None:
    response = await async_client.post(
        "/ratings",
        headers=auth_headers(world.rater.user_id),
        json={"store_id": world.store_id, "value": 3.5},
    )

    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"
    assert response.json()["field"] == "value"


@pytest.mark.parametrize("value", [True, "4", 4.0])
async def test_coercible_values_are_rejected(
    async_client: AsyncClient, db: AsyncSession, world: SeededWorld, value: object
) -> None:
    response = await async_client.post(
        "/ratings",
        headers=auth_headers(world.rater.user_id),
        json={"store_id": world.store_id, "value": value},
    )

    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"
    assert response.json()["field"] == "value"
    assert await db.scalar(select(func.count()).select_from(Rating)) == 0


async def test_store_owner_cannot_rate(async_client: AsyncClient, world: SeededWorld) -> None:
    response = await async_client.post(
        "/ratings",
        headers=auth_headers(world.owner.user_id),
        json={"store_id": world.store_id, "value": 5},
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["code"] == "forbidden"


async def test_rating_unknown_store_is_404(
    async_client: AsyncClient, world: SeededWorld
) -> None:
    response = await async_client.post(
        "/ratings",
        headers=auth_headers(world.rater.user_id),
        json={"store_id": "missing", "value": 5},
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["field"] == "store_id"


async def test_my_ratings_lists_all(async_client: AsyncClient, world: SeededWorld) -> None:
    headers = auth_headers(world.rater.user_id)
    await async_client.post(
        "/ratings", headers=headers, json={"store_id": world.store_id, "value": 3}
    )

    response = await async_client.get("/ratings/mine", headers=headers)

    assert response.status_code == status.HTTP_200_OK
    [rating] = response.json()
    assert rating["store_id"] == world.store_id
    assert rating["rating"] == 3


async def test_admin_deletes_rating(async_client: AsyncClient, world: SeededWorld) -> None:
    submitted = await async_client.post(
        "/ratings",
        headers=auth_headers(world.rater.user_id),
        json={"store_id": world.store_id, "value": 3},
    )
    rating_id = submitted.json()["id"]

    forbidden = await async_client.delete(
        f"/ratings/{rating_id}", headers=auth_headers(world.rater.user_id)
    )
    deleted = await async_client.delete(
        f"/ratings/{rating_id}", headers=auth_headers(world.admin.user_id)
    )
    store = await async_client.get(
        f"/stores/{world.store_id}", headers=auth_headers(world.admin.user_id)
    )

    assert forbidden.status_code == status.HTTP_403_FORBIDDEN
    assert deleted.status_code == status.HTTP_204_NO_CONTENT
    assert store.json()["total_ratings"] == 0
    assert store.json()["average_rating"] == 0.0
