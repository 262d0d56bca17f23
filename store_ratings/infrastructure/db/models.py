from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from store_ratings.core.auth import SUBJECT_MAX_LENGTH, Role

from .base import Base

NAME_MIN_LENGTH = 20
NAME_MAX_LENGTH = 60
ADDRESS_MAX_LENGTH = 400
RATING_MIN = 1
RATING_MAX = 5

# Primary key of the single row in role_bootstrap
ADMIN_BOOTSTRAP_SLOT = "system_administrator"


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


class TimestampMixin:
    """Adds created_at/updated_at populated on the Python side.

    Values are known right after flush, so async callers never trigger a
    refresh to read them.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )


class UserModel(TimestampMixin, Base):
    """Profile row for an identity issued by the identity provider."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "full_name IS NULL OR "
            f"length(full_name) BETWEEN {NAME_MIN_LENGTH} AND {NAME_MAX_LENGTH}",
            name="full_name_length",
        ),
        CheckConstraint(
            f"address IS NULL OR length(address) <= {ADDRESS_MAX_LENGTH}",
            name="address_length",
        ),
    )

    # Opaque subject from the identity provider, not generated here
    id: Mapped[str] = mapped_column(String(SUBJECT_MAX_LENGTH), primary_key=True)
    full_name: Mapped[str | None] = mapped_column(String(NAME_MAX_LENGTH), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, full_name={self.full_name})>"


class UserRoleModel(Base):
    """Role assignment. One row per user."""

    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role"),
        UniqueConstraint("user_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="app_role", values_callable=lambda e: [x.value for x in e]),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<UserRoleModel(user_id={self.user_id}, role={self.role.value})>"


class RoleBootstrap(Base):
    """Sentinel claimed by the first identity ever bootstrapped.

    The primary key admits exactly one row, which makes "first user becomes
    administrator" a single conditional insert.
    """

    __tablename__ = "role_bootstrap"

    slot: Mapped[str] = mapped_column(String(32), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    claimed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )


class Store(TimestampMixin, Base):
    __tablename__ = "stores"
    __table_args__ = (
        CheckConstraint(
            f"length(name) BETWEEN {NAME_MIN_LENGTH} AND {NAME_MAX_LENGTH}", name="name_length"
        ),
        CheckConstraint(f"length(address) <= {ADDRESS_MAX_LENGTH}", name="address_length"),
        CheckConstraint("average_rating BETWEEN 0 AND 5", name="average_rating_range"),
        CheckConstraint("total_ratings >= 0", name="total_ratings_non_negative"),
        UniqueConstraint("owner_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    # Derived from ratings; written only by the aggregation engine
    average_rating: Mapped[Decimal] = mapped_column(
        Numeric(2, 1), default=Decimal("0.0"), server_default="0.0", nullable=False
    )
    total_ratings: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )

    def __repr__(self) -> str:
        return f"<Store(id={self.id}, name={self.name}, total_ratings={self.total_ratings})>"


class Rating(TimestampMixin, Base):
    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "store_id"),
        CheckConstraint(f"rating BETWEEN {RATING_MIN} AND {RATING_MAX}", name="rating_range"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    store_id: Mapped[str] = mapped_column(
        ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
