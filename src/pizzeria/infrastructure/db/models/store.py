from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Integer, SmallInteger, String, func
from sqlalchemy.orm import Mapped, mapped_column

from pizzeria.infrastructure.db.models.base import Base


class PizzeriaSettingsModel(Base):
    __tablename__ = "pizzeria_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_open: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    whatsapp: Mapped[str | None] = mapped_column(String(30), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    pix_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pix_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class StoreHourModel(Base):
    __tablename__ = "store_hours"

    day_of_week: Mapped[int] = mapped_column(SmallInteger, primary_key=True, autoincrement=False)
    is_closed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    open_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    close_time: Mapped[str | None] = mapped_column(String(8), nullable=True)


class StoreExceptionModel(Base):
    __tablename__ = "store_exceptions"

    day: Mapped[date] = mapped_column("date", Date, primary_key=True)
    is_closed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    open_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    close_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    note: Mapped[str | None] = mapped_column(String(500), nullable=True)
