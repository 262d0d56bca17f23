from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from store_ratings.core.auth import Role


@dataclass(slots=True, frozen=True)
class Actor:
    """The authenticated caller of an operation.

    ``role`` is ``None`` until the role store has bootstrapped the identity.
    """

    user_id: str
    role: Role | None = None
    email: str = ""


@dataclass(slots=True)
class RatingEntry:
    """A rating row joined with the rater's display name."""

    id: str
    user_id: str
    store_id: str
    rating: int
    user_name: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class DashboardStats:
    users: int
    stores: int
    ratings: int
