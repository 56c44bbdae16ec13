"""create cash register shifts and movements

Revision ID: 202610190900
Revises: 202610010900
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "202610190900"
down_revision = "202610010900"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "cash_register_shifts",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("opened_by", sa.String(length=64), nullable=False),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("opening_balance_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("closed_by", sa.String(length=64), nullable=True),
        sa.Column("closing_balance_cents", sa.Integer(), nullable=True),
        sa.Column("note", sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_cash_register_shifts_opened_by_opened_at",
        "cash_register_shifts",
        ["opened_by", "opened_at"],
    )
    op.create_index(
        "uq_cash_register_shifts_open_per_user",
        "cash_register_shifts",
        ["opened_by"],
        unique=True,
        postgresql_where=sa.text("closed_at IS NULL"),
    )

    op.create_table(
        "cash_register_movements",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("shift_id", sa.String(length=50), nullable=False),
        sa.Column("type", sa.String(length=10), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("note", sa.String(length=500), nullable=True),
        sa.Column("created_by", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "amount_cents > 0",
            name="ck_cash_register_movements_amount_positive",
        ),
        sa.CheckConstraint(
            "type IN ('SALE', 'SUPPLY', 'WITHDRAW')",
            name="ck_cash_register_movements_type",
        ),
        sa.ForeignKeyConstraint(
            ["shift_id"],
            ["cash_register_shifts.id"],
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_cash_register_movements_shift_id_created_at",
        "cash_register_movements",
        ["shift_id", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_cash_register_movements_shift_id_created_at",
        table_name="cash_register_movements",
    )
    op.drop_table("cash_register_movements")
    op.drop_index("uq_cash_register_shifts_open_per_user", table_name="cash_register_shifts")
    op.drop_index(
        "ix_cash_register_shifts_opened_by_opened_at",
        table_name="cash_register_shifts",
    )
    op.drop_table("cash_register_shifts")
