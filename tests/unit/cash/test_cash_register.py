from __future__ import annotations

import sys
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from pizzeria.application.dto.requests import (
    CashMovementRequest,
    CloseCashShiftRequest,
    OpenCashShiftRequest,
)
from pizzeria.application.ports.repositories import StaleCashShiftError
from pizzeria.application.use_cases.cash_register import (
    AddCashMovement,
    CloseCashShift,
    GetCashRegister,
    OpenCashShift,
)
from pizzeria.domain.auth.session import PermissionDeniedError, Role, UserSession
from pizzeria.domain.cash.entities import (
    CashMovement,
    CashShift,
    InvalidCashMovementError,
    MovementType,
    NoOpenShiftError,
    ShiftAlreadyOpenError,
    cash_totals,
    computed_balance,
)
from pizzeria.domain.common.ids import MovementId, ShiftId, UserId
from pizzeria.domain.common.money import Money

NOW = datetime(2026, 10, 19, 21, 0, tzinfo=timezone.utc)
STAFF = UserSession(user_id=UserId("usr_staff"), roles=frozenset({Role.STAFF}))
ADMIN = UserSession(user_id=UserId("usr_admin"), roles=frozenset({Role.ADMIN}))
COURIER = UserSession(user_id=UserId("usr_courier"), roles=frozenset({Role.DELIVERY}))


class _FakeCashRepository:
    def __init__(self) -> None:
        self.shifts: dict[str, CashShift] = {}
        self.movements: list[CashMovement] = []
        self.fail_close = False

    def get_open_shift(self, user_id: UserId) -> CashShift | None:
        open_shifts = [
            shift for shift in self.shifts.values() if shift.opened_by == user_id and shift.is_open
        ]
        return max(open_shifts, key=lambda shift: shift.opened_at, default=None)

    def open_shift(self, shift: CashShift) -> None:
        self.shifts[str(shift.shift_id)] = shift

    def close_shift(self, shift: CashShift) -> None:
        if self.fail_close:
            raise StaleCashShiftError("closed elsewhere")
        self.shifts[str(shift.shift_id)] = shift

    def add_movement(self, movement: CashMovement) -> None:
        self.movements.append(movement)

    def list_movements(self, shift_id: ShiftId) -> list[CashMovement]:
        selected = [movement for movement in self.movements if movement.shift_id == shift_id]
        return sorted(selected, key=lambda movement: movement.created_at, reverse=True)


class _Clock:
    def __init__(self) -> None:
        self.now = NOW

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(minutes=1)
        return self.now


def _movement(movement_type: MovementType, cents: int) -> CashMovement:
    return CashMovement(
        movement_id=MovementId(f"mov_{movement_type.value.lower()}_{cents}"),
        shift_id=ShiftId("sft_1"),
        movement_type=movement_type,
        amount=Money(amount_cents=cents),
        created_by=STAFF.user_id,
        created_at=NOW,
    )


def _open(repository: _FakeCashRepository, clock: _Clock, session: UserSession = STAFF) -> None:
    OpenCashShift(repository, clock).execute(
        OpenCashShiftRequest.model_validate({"openingBalanceCents": 10000, "note": "troco"}),
        session,
    )


def _record(
    repository: _FakeCashRepository,
    clock: _Clock,
    movement_type: str,
    cents: int,
    session: UserSession = STAFF,
) -> None:
    AddCashMovement(repository, clock).execute(
        CashMovementRequest.model_validate({"type": movement_type, "amountCents": cents}),
        session,
    )


def test_computed_balance_adds_sales_and_supplies_and_subtracts_withdraws() -> None:
    shift = CashShift(
        shift_id=ShiftId("sft_1"),
        opened_by=STAFF.user_id,
        opened_at=NOW,
        opening_balance=Money(amount_cents=10000),
    )
    movements = [
        _movement(MovementType.SALE, 4500),
        _movement(MovementType.SALE, 3000),
        _movement(MovementType.SUPPLY, 500),
        _movement(MovementType.WITHDRAW, 2000),
    ]

    totals = cash_totals(movements)

    assert totals.sales == Money(amount_cents=7500)
    assert totals.supplies == Money(amount_cents=500)
    assert totals.withdraws == Money(amount_cents=2000)
    assert computed_balance(shift, movements) == 16000
    assert computed_balance(shift, []) == 10000


def test_withdraws_may_drive_the_computed_balance_below_zero() -> None:
    shift = CashShift(
        shift_id=ShiftId("sft_1"),
        opened_by=STAFF.user_id,
        opened_at=NOW,
        opening_balance=Money.zero(),
    )
    assert computed_balance(shift, [_movement(MovementType.WITHDRAW, 700)]) == -700


def test_movement_amount_must_be_positive() -> None:
    with pytest.raises(InvalidCashMovementError):
        _movement(MovementType.SUPPLY, 0)


def test_closing_keeps_the_opening_note_unless_replaced() -> None:
    shift = CashShift(
        shift_id=ShiftId("sft_1"),
        opened_by=STAFF.user_id,
        opened_at=NOW,
        opening_balance=Money.zero(),
        note="turno da noite",
    )
    closed = shift.close(STAFF.user_id, NOW, Money(amount_cents=100))

    assert not closed.is_open
    assert closed.note == "turno da noite"
    assert shift.close(STAFF.user_id, NOW, Money.zero(), note="faltou troco").note == "faltou troco"
    with pytest.raises(NoOpenShiftError):
        closed.close(STAFF.user_id, NOW, Money.zero())


def test_shift_lifecycle_through_use_cases() -> None:
    repository = _FakeCashRepository()
    clock = _Clock()

    assert GetCashRegister(repository).execute(STAFF).shift is None
    _open(repository, clock)
    _record(repository, clock, "SALE", 4500)
    _record(repository, clock, "WITHDRAW", 2000)
    _record(repository, clock, "SUPPLY", 500)

    current = GetCashRegister(repository).execute(STAFF)
    assert current.shift is not None
    assert current.shift.isOpen
    assert current.shift.note == "troco"
    assert [movement.type for movement in current.movements] == ["SUPPLY", "WITHDRAW", "SALE"]
    assert current.totals.sales.amountCents == 4500
    assert current.computedBalanceCents == 13000

    closed = CloseCashShift(repository, clock).execute(
        CloseCashShiftRequest.model_validate({"closingBalanceCents": 12900, "note": "  "}),
        STAFF,
    )
    assert closed.shift is not None
    assert not closed.shift.isOpen
    assert closed.shift.closedBy == "usr_staff"
    assert closed.shift.closingBalance is not None
    assert closed.shift.closingBalance.amountCents == 12900
    assert closed.shift.note == "troco"
    assert closed.computedBalanceCents == 13000
    assert GetCashRegister(repository).execute(STAFF).shift is None


def test_shifts_are_per_user() -> None:
    repository = _FakeCashRepository()
    clock = _Clock()
    _open(repository, clock, STAFF)
    _open(repository, clock, ADMIN)
    _record(repository, clock, "SALE", 1000, ADMIN)

    assert GetCashRegister(repository).execute(STAFF).computedBalanceCents == 10000
    assert GetCashRegister(repository).execute(ADMIN).computedBalanceCents == 11000


def test_opening_twice_is_rejected() -> None:
    repository = _FakeCashRepository()
    clock = _Clock()
    _open(repository, clock)

    with pytest.raises(ShiftAlreadyOpenError) as exc_info:
        _open(repository, clock)
    assert exc_info.value.details["shiftId"] in repository.shifts


def test_movement_and_close_need_an_open_shift() -> None:
    repository = _FakeCashRepository()
    clock = _Clock()

    with pytest.raises(NoOpenShiftError):
        _record(repository, clock, "SALE", 100)
    with pytest.raises(NoOpenShiftError):
        CloseCashShift(repository, clock).execute(
            CloseCashShiftRequest.model_validate({"closingBalanceCents": 0}),
            STAFF,
        )


def test_close_race_reports_no_open_shift() -> None:
    repository = _FakeCashRepository()
    clock = _Clock()
    _open(repository, clock)
    repository.fail_close = True

    with pytest.raises(NoOpenShiftError):
        CloseCashShift(repository, clock).execute(
            CloseCashShiftRequest.model_validate({"closingBalanceCents": 0}),
            STAFF,
        )


@pytest.mark.parametrize("session", [None, COURIER, replace(STAFF, roles=frozenset({Role.USER}))])
def test_cash_register_requires_admin_or_staff(session: UserSession | None) -> None:
    with pytest.raises(PermissionDeniedError):
        GetCashRegister(_FakeCashRepository()).execute(session)
