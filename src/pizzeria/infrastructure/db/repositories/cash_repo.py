from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pizzeria.application.ports.repositories import CashRegisterRepository, StaleCashShiftError
from pizzeria.domain.cash.entities import (
    CashMovement,
    CashShift,
    MovementType,
    ShiftAlreadyOpenError,
)
from pizzeria.domain.common.ids import MovementId, ShiftId, UserId
from pizzeria.domain.common.money import Money
from pizzeria.infrastructure.db.models.cash import CashMovementModel, CashShiftModel
from pizzeria.infrastructure.db.session import get_engine


class SqlAlchemyCashRegisterRepository(CashRegisterRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get_open_shift(self, user_id: UserId) -> CashShift | None:
        statement = (
            select(CashShiftModel)
            .where(
                CashShiftModel.opened_by == str(user_id),
                CashShiftModel.closed_at.is_(None),
            )
            .order_by(CashShiftModel.opened_at.desc())
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return _shift_to_domain(model)

    def open_shift(self, shift: CashShift) -> None:
        with Session(self._engine) as session:
            session.add(
                CashShiftModel(
                    id=str(shift.shift_id),
                    opened_by=str(shift.opened_by),
                    opened_at=shift.opened_at,
                    opening_balance_cents=shift.opening_balance.amount_cents,
                    currency=shift.opening_balance.currency,
                    note=shift.note,
                )
            )
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ShiftAlreadyOpenError(shift.opened_by) from exc

    def close_shift(self, shift: CashShift) -> None:
        if shift.closed_at is None or shift.closing_balance is None:
            raise ValueError("close_shift needs a closed shift")
        statement = (
            update(CashShiftModel)
            .where(
                CashShiftModel.id == str(shift.shift_id),
                CashShiftModel.closed_at.is_(None),
            )
            .values(
                closed_at=shift.closed_at,
                closed_by=str(shift.closed_by) if shift.closed_by is not None else None,
                closing_balance_cents=shift.closing_balance.amount_cents,
                note=shift.note,
            )
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                raise StaleCashShiftError(f"cash shift {shift.shift_id} is not open")
            session.commit()

    def add_movement(self, movement: CashMovement) -> None:
        with Session(self._engine) as session:
            session.add(
                CashMovementModel(
                    id=str(movement.movement_id),
                    shift_id=str(movement.shift_id),
                    type=movement.movement_type.value,
                    amount_cents=movement.amount.amount_cents,
                    currency=movement.amount.currency,
                    note=movement.note,
                    created_by=str(movement.created_by),
                    created_at=movement.created_at,
                )
            )
            session.commit()

    def list_movements(self, shift_id: ShiftId) -> list[CashMovement]:
        statement = (
            select(CashMovementModel)
            .where(CashMovementModel.shift_id == str(shift_id))
            .order_by(CashMovementModel.created_at.desc(), CashMovementModel.id.desc())
        )
        with Session(self._engine) as session:
            return [_movement_to_domain(model) for model in session.execute(statement).scalars()]


def _shift_to_domain(model: CashShiftModel) -> CashShift:
    return CashShift(
        shift_id=ShiftId(model.id),
        opened_by=UserId(model.opened_by),
        opened_at=_ensure_utc(model.opened_at),
        opening_balance=Money(amount_cents=model.opening_balance_cents, currency=model.currency),
        closed_at=_ensure_utc(model.closed_at) if model.closed_at is not None else None,
        closed_by=UserId(model.closed_by) if model.closed_by else None,
        closing_balance=(
            Money(amount_cents=model.closing_balance_cents, currency=model.currency)
            if model.closing_balance_cents is not None
            else None
        ),
        note=model.note,
    )


def _movement_to_domain(model: CashMovementModel) -> CashMovement:
    return CashMovement(
        movement_id=MovementId(model.id),
        shift_id=ShiftId(model.shift_id),
        movement_type=MovementType(model.type),
        amount=Money(amount_cents=model.amount_cents, currency=model.currency),
        created_by=UserId(model.created_by),
        created_at=_ensure_utc(model.created_at),
        note=model.note,
    )


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
