from __future__ import annotations

import logging
from uuid import uuid4

from pizzeria.application.dto.requests import (
    CashMovementRequest,
    CloseCashShiftRequest,
    OpenCashShiftRequest,
)
from pizzeria.application.dto.responses import CashRegisterResponse
from pizzeria.application.mappers.cash_mapper import to_cash_register_response
from pizzeria.application.metrics.cash_register import (
    record_cash_movement,
    record_shift_closed,
    record_shift_opened,
)
from pizzeria.application.ports.repositories import CashRegisterRepository, StaleCashShiftError
from pizzeria.application.use_cases.clock import Clock, utc_now
from pizzeria.domain.auth.session import (
    OrderAction,
    PermissionDeniedError,
    UserSession,
    ensure_allowed,
)
from pizzeria.domain.cash.entities import (
    CashMovement,
    CashShift,
    NoOpenShiftError,
    ShiftAlreadyOpenError,
    computed_balance,
)
from pizzeria.domain.common.ids import MovementId, ShiftId, UserId
from pizzeria.domain.common.money import Money

logger = logging.getLogger(__name__)


def _cash_operator(session: UserSession | None) -> UserId:
    ensure_allowed(session, OrderAction.MANAGE_CASH)
    if session is None:
        raise PermissionDeniedError(OrderAction.MANAGE_CASH)
    return session.user_id


def _clean(note: str | None) -> str | None:
    if note is None or not note.strip():
        return None
    return note.strip()


class GetCashRegister:
    """Current open shift of the caller, with its movements and totals."""

    def __init__(self, cash_repository: CashRegisterRepository) -> None:
        self._cash_repository = cash_repository

    def execute(self, session: UserSession | None) -> CashRegisterResponse:
        user_id = _cash_operator(session)
        shift = self._cash_repository.get_open_shift(user_id)
        if shift is None:
            return to_cash_register_response(None, [])
        return to_cash_register_response(
            shift,
            self._cash_repository.list_movements(shift.shift_id),
        )


class OpenCashShift:
    def __init__(self, cash_repository: CashRegisterRepository, clock: Clock = utc_now) -> None:
        self._cash_repository = cash_repository
        self._clock = clock

    def execute(
        self,
        request_dto: OpenCashShiftRequest,
        session: UserSession | None,
    ) -> CashRegisterResponse:
        user_id = _cash_operator(session)
        current = self._cash_repository.get_open_shift(user_id)
        if current is not None:
            raise ShiftAlreadyOpenError(user_id, current.shift_id)

        shift = CashShift(
            shift_id=ShiftId(f"sft_{uuid4().hex[:12]}"),
            opened_by=user_id,
            opened_at=self._clock(),
            opening_balance=Money(amount_cents=request_dto.opening_balance_cents),
            note=_clean(request_dto.note),
        )
        self._cash_repository.open_shift(shift)
        record_shift_opened()
        logger.info("cash_shift_opened", extra={"shift_id": shift.shift_id})
        return to_cash_register_response(shift, [])


class AddCashMovement:
    def __init__(self, cash_repository: CashRegisterRepository, clock: Clock = utc_now) -> None:
        self._cash_repository = cash_repository
        self._clock = clock

    def execute(
        self,
        request_dto: CashMovementRequest,
        session: UserSession | None,
    ) -> CashRegisterResponse:
        user_id = _cash_operator(session)
        shift = self._cash_repository.get_open_shift(user_id)
        if shift is None:
            raise NoOpenShiftError(user_id)

        movement = CashMovement(
            movement_id=MovementId(f"mov_{uuid4().hex[:12]}"),
            shift_id=shift.shift_id,
            movement_type=request_dto.type,
            amount=Money(
                amount_cents=request_dto.amount_cents,
                currency=shift.opening_balance.currency,
            ),
            created_by=user_id,
            created_at=self._clock(),
            note=_clean(request_dto.note),
        )
        self._cash_repository.add_movement(movement)
        record_cash_movement(movement.movement_type, movement.amount.amount_cents)
        logger.info(
            "cash_movement_recorded",
            extra={"shift_id": shift.shift_id, "movement_type": movement.movement_type.value},
        )
        return to_cash_register_response(
            shift,
            self._cash_repository.list_movements(shift.shift_id),
        )


class CloseCashShift:
    def __init__(self, cash_repository: CashRegisterRepository, clock: Clock = utc_now) -> None:
        self._cash_repository = cash_repository
        self._clock = clock

    def execute(
        self,
        request_dto: CloseCashShiftRequest,
        session: UserSession | None,
    ) -> CashRegisterResponse:
        user_id = _cash_operator(session)
        shift = self._cash_repository.get_open_shift(user_id)
        if shift is None:
            raise NoOpenShiftError(user_id)

        movements = self._cash_repository.list_movements(shift.shift_id)
        closed = shift.close(
            closed_by=user_id,
            closed_at=self._clock(),
            closing_balance=Money(
                amount_cents=request_dto.closing_balance_cents,
                currency=shift.opening_balance.currency,
            ),
            note=_clean(request_dto.note),
        )
        try:
            self._cash_repository.close_shift(closed)
        except StaleCashShiftError as exc:
            raise NoOpenShiftError(user_id) from exc

        record_shift_closed()
        logger.info(
            "cash_shift_closed",
            extra={
                "shift_id": shift.shift_id,
                "closing_balance_cents": request_dto.closing_balance_cents,
                "computed_balance_cents": computed_balance(shift, movements),
            },
        )
        return to_cash_register_response(closed, movements)
