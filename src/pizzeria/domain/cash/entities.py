from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Iterable

from pizzeria.domain.common.ids import MovementId, ShiftId, UserId
from pizzeria.domain.common.money import DEFAULT_CURRENCY, Money


class MovementType(str, Enum):
    SALE = "SALE"
    SUPPLY = "SUPPLY"
    WITHDRAW = "WITHDRAW"


class NoOpenShiftError(Exception):
    def __init__(self, user_id: UserId) -> None:
        super().__init__(f"no open cash shift for user {user_id}")
        self.user_id = user_id


class ShiftAlreadyOpenError(Exception):
    def __init__(self, user_id: UserId, shift_id: ShiftId | None = None) -> None:
        super().__init__(f"user {user_id} already has an open cash shift")
        self.user_id = user_id
        self.shift_id = shift_id

    @property
    def details(self) -> dict[str, object]:
        return {"shiftId": self.shift_id} if self.shift_id is not None else {}


class InvalidCashMovementError(Exception):
    pass


@dataclass(frozen=True)
class CashShift:
    """A cash drawer session opened by one staff member.

    The shift stays open until its owner closes it; a user holds at most one
    open shift at a time.
    """

    shift_id: ShiftId
    opened_by: UserId
    opened_at: datetime
    opening_balance: Money
    closed_at: datetime | None = None
    closed_by: UserId | None = None
    closing_balance: Money | None = None
    note: str | None = None

    @property
    def is_open(self) -> bool:
        return self.closed_at is None

    def close(
        self,
        closed_by: UserId,
        closed_at: datetime,
        closing_balance: Money,
        note: str | None = None,
    ) -> CashShift:
        if not self.is_open:
            raise NoOpenShiftError(closed_by)
        return replace(
            self,
            closed_at=closed_at,
            closed_by=closed_by,
            closing_balance=closing_balance,
            note=note if note is not None else self.note,
        )


@dataclass(frozen=True)
class CashMovement:
    movement_id: MovementId
    shift_id: ShiftId
    movement_type: MovementType
    amount: Money
    created_by: UserId
    created_at: datetime
    note: str | None = None

    def __post_init__(self) -> None:
        if self.amount.amount_cents <= 0:
            raise InvalidCashMovementError("cash movement amount must be greater than zero")


@dataclass(frozen=True)
class CashTotals:
    sales: Money
    supplies: Money
    withdraws: Money


def cash_totals(movements: Iterable[CashMovement], currency: str = DEFAULT_CURRENCY) -> CashTotals:
    sums = {movement_type: Money.zero(currency) for movement_type in MovementType}
    for movement in movements:
        sums[movement.movement_type] = sums[movement.movement_type] + movement.amount
    return CashTotals(
        sales=sums[MovementType.SALE],
        supplies=sums[MovementType.SUPPLY],
        withdraws=sums[MovementType.WITHDRAW],
    )


def computed_balance(shift: CashShift, movements: Iterable[CashMovement]) -> int:
    """Expected drawer balance in cents: opening + sales + supplies - withdraws.

    Returned as plain cents since withdrawals may exceed what was counted in.
    """
    totals = cash_totals(movements, currency=shift.opening_balance.currency)
    return (
        shift.opening_balance.amount_cents
        + totals.sales.amount_cents
        + totals.supplies.amount_cents
        - totals.withdraws.amount_cents
    )
