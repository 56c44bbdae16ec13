"""create store schedule, orders and roles

Revision ID: 202610010900
Revises:
Create Date: 2026-10-01 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "202610010900"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "pizzeria_settings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_open", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("whatsapp", sa.String(length=30), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("pix_key", sa.String(length=255), nullable=True),
        sa.Column("pix_name", sa.String(length=255), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "store_hours",
        sa.Column("day_of_week", sa.SmallInteger(), autoincrement=False, nullable=False),
        sa.Column("is_closed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("open_time", sa.String(length=8), nullable=True),
        sa.Column("close_time", sa.String(length=8), nullable=True),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_store_hours_day_of_week"),
        sa.PrimaryKeyConstraint("day_of_week"),
    )

    op.create_table(
        "store_exceptions",
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("is_closed", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("open_time", sa.String(length=8), nullable=True),
        sa.Column("close_time", sa.String(length=8), nullable=True),
        sa.Column("note", sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint("date"),
    )

    op.create_table(
        "orders",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("customer_phone", sa.String(length=30), nullable=False),
        sa.Column("customer_address", sa.String(length=500), nullable=False),
        sa.Column("customer_details", sa.JSON(), nullable=True),
        sa.Column("payment_method", sa.String(length=10), nullable=False),
        sa.Column("needs_change", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("change_for_cents", sa.Integer(), nullable=True),
        sa.Column("total_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("order_origin", sa.String(length=20), nullable=True),
        sa.Column("table_number", sa.String(length=20), nullable=True),
        sa.Column("created_by_user_id", sa.String(length=64), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_orders_created_at_desc",
        "orders",
        [sa.text("created_at DESC")],
        unique=False,
    )
    op.create_index(
        "ix_orders_status_created_at",
        "orders",
        [sa.text("status"), sa.text("created_at DESC")],
        unique=False,
    )
    op.create_index("ix_orders_created_by_user_id", "orders", ["created_by_user_id"])

    op.create_table(
        "user_roles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )
    op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_user_roles_user_id", table_name="user_roles")
    op.drop_table("user_roles")
    op.drop_index("ix_orders_created_by_user_id", table_name="orders")
    op.drop_index("ix_orders_status_created_at", table_name="orders")
    op.drop_index("ix_orders_created_at_desc", table_name="orders")
    op.drop_table("orders")
    op.drop_table("store_exceptions")
    op.drop_table("store_hours")
    op.drop_table("pizzeria_settings")
