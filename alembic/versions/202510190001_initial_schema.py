"""Initial schema: users, roles, stores, ratings

Revision ID: 202510190001
Revises:
Create Date: 2025-10-19 00:01:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "202510190001"
down_revision = None
branch_labels = None
depends_on = None

app_role_enum = sa.Enum(
    "system_administrator",
    "normal_user",
    "store_owner",
    name="app_role",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("full_name", sa.String(length=60), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.CheckConstraint(
            "full_name IS NULL OR length(full_name) BETWEEN 20 AND 60",
            name="ck_users_full_name_length",
        ),
        sa.CheckConstraint(
            "address IS NULL OR length(address) <= 400", name="ck_users_address_length"
        ),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "user_roles",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("role", app_role_enum, nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("id", name="pk_user_roles"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_user_roles_user_id_users", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("user_id", "role", name="uq_user_roles_user_id_role"),
        sa.UniqueConstraint("user_id", name="uq_user_roles_user_id"),
    )

    op.create_table(
        "role_bootstrap",
        sa.Column("slot", sa.String(length=32), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column(
            "claimed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("slot", name="pk_role_bootstrap"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_role_bootstrap_user_id_users", ondelete="CASCADE"
        ),
    )

    op.create_table(
        "stores",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=60), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column(
            "average_rating", sa.Numeric(2, 1), nullable=False, server_default=sa.text("0.0")
        ),
        sa.Column("total_ratings", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_stores"),
        sa.ForeignKeyConstraint(
            ["owner_id"], ["users.id"], name="fk_stores_owner_id_users", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("owner_id", name="uq_stores_owner_id"),
        sa.CheckConstraint("length(name) BETWEEN 20 AND 60", name="ck_stores_name_length"),
        sa.CheckConstraint("length(address) <= 400", name="ck_stores_address_length"),
        sa.CheckConstraint(
            "average_rating BETWEEN 0 AND 5", name="ck_stores_average_rating_range"
        ),
        sa.CheckConstraint("total_ratings >= 0", name="ck_stores_total_ratings_non_negative"),
    )
    op.create_index("ix_stores_name", "stores", ["name"])

    op.create_table(
        "ratings",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("store_id", sa.String(length=36), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_ratings"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_ratings_user_id_users", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["store_id"], ["stores.id"], name="fk_ratings_store_id_stores", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("user_id", "store_id", name="uq_ratings_user_id_store_id"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_ratings_rating_range"),
    )
    op.create_index("ix_ratings_store_id", "ratings", ["store_id"])


def downgrade() -> None:
    op.drop_index("ix_ratings_store_id", "ratings")
    op.drop_table("ratings")
    op.drop_index("ix_stores_name", "stores")
    op.drop_table("stores")
    op.drop_table("role_bootstrap")
    op.drop_table("user_roles")
    op.drop_index("ix_users_email", "users")
    op.drop_table("users")
    app_role_enum.drop(op.get_bind(), checkfirst=True)
