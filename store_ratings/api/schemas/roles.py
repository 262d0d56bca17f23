"""Pydantic schemas for role endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from store_ratings.core.auth import Role


class BootstrapRequest(BaseModel):
    """First-login payload; profile fields come from the sign-up form."""

    user_id: str | None = Field(None, description="Must match the token subject when given")
    full_name: str | None = Field(None, description="Display name (20-60 characters)")
    email: str | None = Field(None, description="Contact email")
    address: str | None = Field(None, description="Postal address (max 400 characters)")


class AssignRoleRequest(BaseModel):
    user_id: str = Field(..., description="Identity to assign the role to")
    role: Role = Field(..., description="Role to assign")


class RoleResponse(BaseModel):
    user_id: str
    role: Role | None = Field(None, description="Null when no role has been assigned")
