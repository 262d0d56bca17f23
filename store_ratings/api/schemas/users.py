"""Pydantic schemas for the administrator user directory."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from store_ratings.core.auth import Role


class UserCreate(BaseModel):
    user_id: str = Field(..., description="Identity issued by the identity provider")
    full_name: str = Field(..., description="Full name (20-60 characters)")
    email: str = Field(..., description="Contact email")
    address: str = Field(..., description="Postal address (max 400 characters)")
    role: Role = Field(default=Role.NORMAL_USER, description="Single role for the user")


class UserResponse(BaseModel):
    id: str
    full_name: str | None = None
    email: str | None = None
    address: str | None = None
    role: Role | None = None
    created_at: datetime


class StatsResponse(BaseModel):
    users: int
    stores: int
    ratings: int
