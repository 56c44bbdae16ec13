from __future__ import annotations

from fastapi import APIRouter, Depends

from pizzeria.api.dependencies import current_session, trace_context
from pizzeria.application.dto.requests import SetOrderStatusRequest
from pizzeria.application.dto.responses import NotificationResponse, OrderTransitionResponse
from pizzeria.application.use_cases.change_order_status import ChangeOrderStatus
from pizzeria.application.use_cases.context import TraceContext
from pizzeria.application.use_cases.notify_order import NotifyOrder
from pizzeria.domain.auth.session import OrderAction, UserSession
from pizzeria.domain.common.ids import OrderId
from pizzeria.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from pizzeria.infrastructure.messaging.redis_gateways import (
    RedisMessagingGateway,
    RedisPaymentFlowGateway,
)
from pizzeria.infrastructure.messaging.redis_publisher import RedisEventPublisher

router = APIRouter()


def _change_order_status_use_case() -> ChangeOrderStatus:
    return ChangeOrderStatus(
        order_repository=SqlAlchemyOrderRepository(),
        publisher=RedisEventPublisher(),
        messaging=RedisMessagingGateway(),
        payment_flows=RedisPaymentFlowGateway(),
    )


def _notify_order_use_case() -> NotifyOrder:
    return NotifyOrder(
        order_repository=SqlAlchemyOrderRepository(),
        messaging=RedisMessagingGateway(),
    )


def _run_action(
    order_id: str,
    action: OrderAction,
    session: UserSession | None,
    trace_ctx: TraceContext,
) -> OrderTransitionResponse:
    return _change_order_status_use_case().execute(
        order_id=OrderId(order_id),
        action=action,
        trace_ctx=trace_ctx,
        session=session,
    )


@router.post("/v1/orders/{order_id}/confirm-payment", response_model=OrderTransitionResponse)
def confirm_payment(
    order_id: str,
    session: UserSession | None = Depends(current_session),
    trace_ctx: TraceContext = Depends(trace_context),
) -> OrderTransitionResponse:
    return _run_action(order_id, OrderAction.CONFIRM_PAYMENT, session, trace_ctx)


@router.post("/v1/orders/{order_id}/prepare", response_model=OrderTransitionResponse)
def start_preparing(
    order_id: str,
    session: UserSession | None = Depends(current_session),
    trace_ctx: TraceContext = Depends(trace_context),
) -> OrderTransitionResponse:
    return _run_action(order_id, OrderAction.START_PREPARING, session, trace_ctx)


@router.post("/v1/orders/{order_id}/out-for-delivery", response_model=OrderTransitionResponse)
def mark_out_for_delivery(
    order_id: str,
    session: UserSession | None = Depends(current_session),
    trace_ctx: TraceContext = Depends(trace_context),
) -> OrderTransitionResponse:
    return _run_action(order_id, OrderAction.MARK_OUT_FOR_DELIVERY, session, trace_ctx)


@router.post("/v1/orders/{order_id}/deliver", response_model=OrderTransitionResponse)
def mark_delivered(
    order_id: str,
    session: UserSession | None = Depends(current_session),
    trace_ctx: TraceContext = Depends(trace_context),
) -> OrderTransitionResponse:
    return _run_action(order_id, OrderAction.MARK_DELIVERED, session, trace_ctx)


@router.post("/v1/orders/{order_id}/cancel", response_model=OrderTransitionResponse)
def cancel_order(
    order_id: str,
    session: UserSession | None = Depends(current_session),
    trace_ctx: TraceContext = Depends(trace_context),
) -> OrderTransitionResponse:
    return _run_action(order_id, OrderAction.CANCEL, session, trace_ctx)


@router.put("/v1/orders/{order_id}/status", response_model=OrderTransitionResponse)
def set_order_status(
    order_id: str,
    request_dto: SetOrderStatusRequest,
    session: UserSession | None = Depends(current_session),
    trace_ctx: TraceContext = Depends(trace_context),
) -> OrderTransitionResponse:
    return _change_order_status_use_case().execute(
        order_id=OrderId(order_id),
        action=OrderAction.SET_STATUS,
        trace_ctx=trace_ctx,
        session=session,
        target_status=request_dto.status,
    )


@router.post("/v1/orders/{order_id}/notify", response_model=NotificationResponse)
def notify_order(
    order_id: str,
    session: UserSession | None = Depends(current_session),
) -> NotificationResponse:
    return _notify_order_use_case().execute(order_id=OrderId(order_id), session=session)
