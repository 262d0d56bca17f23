"""Pydantic schemas for store endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class StoreCreate(BaseModel):
    name: str = Field(..., description="Store name (20-60 characters)")
    email: str = Field(..., description="Store contact email")
    address: str = Field(..., description="Store address (max 400 characters)")
    owner_id: str = Field(..., description="User holding the store_owner role")


class StoreUpdate(BaseModel):
    """Only profile fields; aggregates and ownership are rejected as unknown keys."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    email: str | None = None
    address: str | None = None


class StoreResponse(BaseModel):
    id: str
    name: str
    email: str
    address: str
    owner_id: str
    average_rating: float = Field(..., description="Mean rating, one decimal place")
    total_ratings: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    my_rating: int | None = Field(None, description="The caller's own rating, if any")


class OwnerStoreResponse(BaseModel):
    """Store of the calling owner; ``store`` is null when none is assigned."""

    store: StoreResponse | None = None


class StoreRatingItem(BaseModel):
    id: str
    rating: int
    user_id: str
    user_name: str | None = None
    created_at: datetime
    updated_at: datetime
