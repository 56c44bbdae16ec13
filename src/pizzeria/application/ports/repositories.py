from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol

from pizzeria.domain.auth.session import Role
from pizzeria.domain.cash.entities import CashMovement, CashShift
from pizzeria.domain.common.ids import OrderId, ShiftId, UserId
from pizzeria.domain.order.entities import Order, OrderStatus
from pizzeria.domain.schedule.entities import DateException, WeeklyHourRule
from pizzeria.domain.store.entities import PizzeriaSettings


@dataclass(frozen=True)
class OrderQuery:
    statuses: frozenset[OrderStatus] | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None
    order_origin: str | None = None
    created_by_user_id: UserId | None = None


class ScheduleRepository(Protocol):
    def list_weekly_hours(self) -> list[WeeklyHourRule]: ...

    def list_exceptions(self) -> list[DateException]: ...

    def replace_weekly_hours(self, hours: list[WeeklyHourRule]) -> None: ...

    def upsert_exception(self, exception: DateException) -> None: ...

    def delete_exception(self, day: date) -> bool: ...


class SettingsRepository(Protocol):
    def get(self) -> PizzeriaSettings: ...

    def set_manual_open(self, is_open: bool) -> PizzeriaSettings: ...


class OrderRepository(Protocol):
    def add(self, order: Order) -> None: ...

    def get(self, order_id: OrderId) -> Order | None: ...

    def update_status(
        self,
        order_id: OrderId,
        from_status: OrderStatus,
        to_status: OrderStatus,
        now: datetime,
    ) -> Order: ...

    def list_orders(
        self,
        query: OrderQuery,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Order], str | None]: ...

    def count_by_status(self, status: OrderStatus) -> int: ...


class RoleRepository(Protocol):
    def list_roles(self, user_id: UserId) -> set[Role]: ...


class CashRegisterRepository(Protocol):
    def get_open_shift(self, user_id: UserId) -> CashShift | None: ...

    def open_shift(self, shift: CashShift) -> None: ...

    def close_shift(self, shift: CashShift) -> None: ...

    def add_movement(self, movement: CashMovement) -> None: ...

    def list_movements(self, shift_id: ShiftId) -> list[CashMovement]: ...


class StaleOrderStatusError(Exception):
    pass


class InvalidCursorError(Exception):
    pass


class StaleCashShiftError(Exception):
    pass
