from __future__ import annotations

from pizzeria.application.dto.responses import (
    CashMovementResponse,
    CashRegisterResponse,
    CashShiftResponse,
    CashTotalsResponse,
)
from pizzeria.application.mappers.money import to_money_response
from pizzeria.domain.cash.entities import (
    CashMovement,
    CashShift,
    CashTotals,
    cash_totals,
    computed_balance,
)


def to_cash_shift_response(shift: CashShift) -> CashShiftResponse:
    return CashShiftResponse(
        shiftId=str(shift.shift_id),
        isOpen=shift.is_open,
        openedBy=str(shift.opened_by),
        openedAt=shift.opened_at,
        openingBalance=to_money_response(shift.opening_balance),
        closedAt=shift.closed_at,
        closedBy=str(shift.closed_by) if shift.closed_by is not None else None,
        closingBalance=(
            to_money_response(shift.closing_balance)
            if shift.closing_balance is not None
            else None
        ),
        note=shift.note,
    )


def to_cash_movement_response(movement: CashMovement) -> CashMovementResponse:
    return CashMovementResponse(
        movementId=str(movement.movement_id),
        shiftId=str(movement.shift_id),
        type=movement.movement_type.value,
        amount=to_money_response(movement.amount),
        note=movement.note,
        createdBy=str(movement.created_by),
        createdAt=movement.created_at,
    )


def _to_totals_response(totals: CashTotals) -> CashTotalsResponse:
    return CashTotalsResponse(
        sales=to_money_response(totals.sales),
        supplies=to_money_response(totals.supplies),
        withdraws=to_money_response(totals.withdraws),
    )


def to_cash_register_response(
    shift: CashShift | None,
    movements: list[CashMovement],
) -> CashRegisterResponse:
    """Shift summary with movements newest first."""
    if shift is None:
        return CashRegisterResponse(totals=_to_totals_response(cash_totals([])))
    ordered = sorted(movements, key=lambda movement: movement.created_at, reverse=True)
    return CashRegisterResponse(
        shift=to_cash_shift_response(shift),
        movements=[to_cash_movement_response(movement) for movement in ordered],
        totals=_to_totals_response(
            cash_totals(movements, currency=shift.opening_balance.currency)
        ),
        computedBalanceCents=computed_balance(shift, movements),
    )
