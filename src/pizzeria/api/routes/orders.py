from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from pizzeria.api.dependencies import current_session, trace_context
from pizzeria.application.dto.requests import PlaceOrderRequest
from pizzeria.application.dto.responses import (
    OrderListResponse,
    OrderResponse,
    PendingOrdersCountResponse,
)
from pizzeria.application.use_cases.context import TraceContext
from pizzeria.application.use_cases.get_order import GetOrder
from pizzeria.application.use_cases.get_store_availability import GetStoreAvailability
from pizzeria.application.use_cases.list_orders import CountPendingOrders, ListOrders
from pizzeria.application.use_cases.place_order import PlaceOrder
from pizzeria.domain.auth.session import UserSession
from pizzeria.domain.common.ids import OrderId
from pizzeria.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from pizzeria.infrastructure.db.repositories.schedule_repo import SqlAlchemyScheduleRepository
from pizzeria.infrastructure.db.repositories.settings_repo import SqlAlchemySettingsRepository
from pizzeria.infrastructure.messaging.redis_gateways import RedisMessagingGateway
from pizzeria.infrastructure.messaging.redis_publisher import RedisEventPublisher
from pizzeria.infrastructure.settings import store_timezone

router = APIRouter()


def _place_order_use_case() -> PlaceOrder:
    schedule_repository = SqlAlchemyScheduleRepository()
    settings_repository = SqlAlchemySettingsRepository()
    return PlaceOrder(
        order_repository=SqlAlchemyOrderRepository(),
        schedule_repository=schedule_repository,
        settings_repository=settings_repository,
        publisher=RedisEventPublisher(),
        messaging=RedisMessagingGateway(),
        store_availability=GetStoreAvailability(
            schedule_repository=schedule_repository,
            settings_repository=settings_repository,
            store_timezone=store_timezone(),
        ),
    )


def _get_order_use_case() -> GetOrder:
    return GetOrder(order_repository=SqlAlchemyOrderRepository())


def _list_orders_use_case() -> ListOrders:
    return ListOrders(order_repository=SqlAlchemyOrderRepository())


def _count_pending_orders_use_case() -> CountPendingOrders:
    return CountPendingOrders(order_repository=SqlAlchemyOrderRepository())


@router.post(
    "/v1/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
)
def place_order(
    request_dto: PlaceOrderRequest,
    session: UserSession | None = Depends(current_session),
    trace_ctx: TraceContext = Depends(trace_context),
) -> OrderResponse:
    return _place_order_use_case().execute(
        request_dto=request_dto,
        trace_ctx=trace_ctx,
        session=session,
    )


@router.get("/v1/orders", response_model=OrderListResponse)
def list_orders(
    status_filter: str | None = Query(default=None, alias="status"),
    created_from: datetime | None = Query(default=None, alias="createdFrom"),
    created_to: datetime | None = Query(default=None, alias="createdTo"),
    order_origin: str | None = Query(default=None, alias="orderOrigin"),
    created_by_user_id: str | None = Query(default=None, alias="createdByUserId"),
    limit: int = 50,
    cursor: str | None = None,
    session: UserSession | None = Depends(current_session),
) -> OrderListResponse:
    return _list_orders_use_case().execute(
        session=session,
        status=status_filter,
        created_from=created_from,
        created_to=created_to,
        order_origin=order_origin,
        created_by_user_id=created_by_user_id,
        limit=limit,
        cursor=cursor,
    )


@router.get("/v1/orders/pending-count", response_model=PendingOrdersCountResponse)
def count_pending_orders(
    session: UserSession | None = Depends(current_session),
) -> PendingOrdersCountResponse:
    return _count_pending_orders_use_case().execute(session=session)


@router.get("/v1/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: str) -> OrderResponse:
    return _get_order_use_case().execute(order_id=OrderId(order_id))
