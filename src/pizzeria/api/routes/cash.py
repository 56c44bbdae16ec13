from __future__ import annotations

from fastapi import APIRouter, Depends

from pizzeria.api.dependencies import current_session
from pizzeria.application.dto.requests import (
    CashMovementRequest,
    CloseCashShiftRequest,
    OpenCashShiftRequest,
)
from pizzeria.application.dto.responses import CashRegisterResponse
from pizzeria.application.use_cases.cash_register import (
    AddCashMovement,
    CloseCashShift,
    GetCashRegister,
    OpenCashShift,
)
from pizzeria.domain.auth.session import UserSession
from pizzeria.infrastructure.db.repositories.cash_repo import SqlAlchemyCashRegisterRepository

router = APIRouter()


def _get_cash_register_use_case() -> GetCashRegister:
    return GetCashRegister(cash_repository=SqlAlchemyCashRegisterRepository())


def _open_cash_shift_use_case() -> OpenCashShift:
    return OpenCashShift(cash_repository=SqlAlchemyCashRegisterRepository())


def _add_cash_movement_use_case() -> AddCashMovement:
    return AddCashMovement(cash_repository=SqlAlchemyCashRegisterRepository())


def _close_cash_shift_use_case() -> CloseCashShift:
    return CloseCashShift(cash_repository=SqlAlchemyCashRegisterRepository())


@router.get("/v1/cash/shift", response_model=CashRegisterResponse)
def get_cash_register(
    session: UserSession | None = Depends(current_session),
) -> CashRegisterResponse:
    return _get_cash_register_use_case().execute(session=session)


@router.post("/v1/cash/shift/open", response_model=CashRegisterResponse, status_code=201)
def open_cash_shift(
    request_dto: OpenCashShiftRequest,
    session: UserSession | None = Depends(current_session),
) -> CashRegisterResponse:
    return _open_cash_shift_use_case().execute(request_dto=request_dto, session=session)


@router.post("/v1/cash/movements", response_model=CashRegisterResponse, status_code=201)
def add_cash_movement(
    request_dto: CashMovementRequest,
    session: UserSession | None = Depends(current_session),
) -> CashRegisterResponse:
    return _add_cash_movement_use_case().execute(request_dto=request_dto, session=session)


@router.post("/v1/cash/shift/close", response_model=CashRegisterResponse)
def close_cash_shift(
    request_dto: CloseCashShiftRequest,
    session: UserSession | None = Depends(current_session),
) -> CashRegisterResponse:
    return _close_cash_shift_use_case().execute(request_dto=request_dto, session=session)
