from __future__ import annotations

from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pizzeria.api.middleware.request_id import get_request_id
from pizzeria.application.use_cases.change_order_status import (
    InvalidOrderTransitionError,
    OrderConflictError,
    UnsupportedOrderActionError,
)
from pizzeria.application.use_cases.get_order import OrderNotFoundError
from pizzeria.application.use_cases.list_orders import (
    InvalidOrderCursorError,
    InvalidOrderQueryError,
)
from pizzeria.application.use_cases.notify_order import NotificationDispatchError
from pizzeria.application.use_cases.place_order import (
    InvalidOrderRequestError,
    OrderTotalMismatchError,
    StoreClosedError,
    UnitPriceMismatchError,
)
from pizzeria.application.use_cases.store_schedule import DateExceptionNotFoundError
from pizzeria.domain.auth.session import PermissionDeniedError
from pizzeria.domain.cart.pricing import UnsupportedCartItemError
from pizzeria.domain.cash.entities import (
    InvalidCashMovementError,
    NoOpenShiftError,
    ShiftAlreadyOpenError,
)
from pizzeria.domain.schedule.entities import InvalidScheduleError


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
            "requestId": get_request_id(),
        },
    )


def _exception_handler(status_code: int, code: str):
    async def handler(_: Request, exc: Exception) -> JSONResponse:
        details = getattr(exc, "details", None)
        return _error_response(
            status_code=status_code,
            code=code,
            message=str(exc),
            details=details if isinstance(details, dict) else None,
        )

    return handler


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = "HTTP_ERROR"
    if http_exc.status_code == 404:
        code = "NOT_FOUND"
    elif http_exc.status_code == 400:
        code = "BAD_REQUEST"
    elif http_exc.status_code == 409:
        code = "CONFLICT"
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        details={"errors": validation_exc.errors()},
    )


def register_exception_handlers(app: FastAPI) -> None:
    mappings: list[tuple[type[Exception], int, str]] = [
        (OrderNotFoundError, 404, "ORDER_NOT_FOUND"),
        (DateExceptionNotFoundError, 404, "SCHEDULE_EXCEPTION_NOT_FOUND"),
        (InvalidScheduleError, 400, "INVALID_SCHEDULE"),
        (InvalidOrderTransitionError, 409, "INVALID_ORDER_TRANSITION"),
        (StoreClosedError, 409, "STORE_CLOSED"),
        (OrderConflictError, 409, "CONFLICT"),
        (PermissionDeniedError, 403, "FORBIDDEN"),
        (OrderTotalMismatchError, 400, "ORDER_TOTAL_MISMATCH"),
        (UnitPriceMismatchError, 400, "UNIT_PRICE_MISMATCH"),
        (InvalidOrderRequestError, 400, "INVALID_REQUEST"),
        (UnsupportedCartItemError, 400, "INVALID_REQUEST"),
        (UnsupportedOrderActionError, 400, "INVALID_REQUEST"),
        (InvalidOrderQueryError, 400, "INVALID_ORDER_QUERY"),
        (InvalidOrderCursorError, 400, "INVALID_ORDER_CURSOR"),
        (NoOpenShiftError, 409, "NO_OPEN_SHIFT"),
        (ShiftAlreadyOpenError, 409, "SHIFT_ALREADY_OPEN"),
        (InvalidCashMovementError, 400, "INVALID_CASH_MOVEMENT"),
        (NotificationDispatchError, 502, "NOTIFICATION_FAILED"),
    ]

    for exc_cls, status_code, code in mappings:
        app.add_exception_handler(exc_cls, _exception_handler(status_code, code))

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
