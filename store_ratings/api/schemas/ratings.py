"""Pydantic schemas for rating endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, StrictInt


class RatingSubmit(BaseModel):
    store_id: str = Field(..., description="Store being rated")
    # JSON true, "4" and 4.0 are rejected rather than coerced
    value: StrictInt = Field(..., description="Whole stars from 1 to 5")


class RatingResponse(BaseModel):
    id: str
    user_id: str
    store_id: str
    rating: int
    created_at: datetime
    updated_at: datetime
    store_average_rating: float | None = None
    store_total_ratings: int | None = None


class MyRatingResponse(BaseModel):
    store_id: str
    rating: int | None = None
