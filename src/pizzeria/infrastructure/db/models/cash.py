from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from pizzeria.infrastructure.db.models.base import Base


class CashShiftModel(Base):
    __tablename__ = "cash_register_shifts"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    opened_by: Mapped[str] = mapped_column(String(64), nullable=False)
    opened_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    opening_balance_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    closed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    closing_balance_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    note: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        Index("ix_cash_register_shifts_opened_by_opened_at", "opened_by", "opened_at"),
        # At most one open shift per user.
        Index(
            "uq_cash_register_shifts_open_per_user",
            "opened_by",
            unique=True,
            postgresql_where=text("closed_at IS NULL"),
            sqlite_where=text("closed_at IS NULL"),
        ),
    )


class CashMovementModel(Base):
    __tablename__ = "cash_register_movements"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    shift_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("cash_register_shifts.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    note: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_cash_register_movements_amount_positive"),
        CheckConstraint(
            "type IN ('SALE', 'SUPPLY', 'WITHDRAW')",
            name="ck_cash_register_movements_type",
        ),
        Index("ix_cash_register_movements_shift_id_created_at", "shift_id", "created_at"),
    )
