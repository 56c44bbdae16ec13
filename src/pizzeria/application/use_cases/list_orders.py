from __future__ import annotations

from datetime import datetime

from pizzeria.application.dto.responses import OrderListResponse, PendingOrdersCountResponse
from pizzeria.application.mappers.order_mapper import to_order_response
from pizzeria.application.metrics.order_lifecycle import record_pending_orders
from pizzeria.application.ports.repositories import InvalidCursorError, OrderQuery, OrderRepository
from pizzeria.domain.auth.session import (
    OrderAction,
    PermissionDeniedError,
    UserSession,
    is_allowed,
)
from pizzeria.domain.common.ids import UserId
from pizzeria.domain.order.entities import OrderStatus

MAX_PAGE_SIZE = 200


class InvalidOrderQueryError(Exception):
    pass


class InvalidOrderCursorError(Exception):
    pass


def parse_statuses(raw: str | None) -> frozenset[OrderStatus] | None:
    """Parse a comma separated status filter; ``ALL`` or empty means no filter."""
    if raw is None or not raw.strip() or raw.strip().upper() == "ALL":
        return None
    statuses: set[OrderStatus] = set()
    for part in raw.split(","):
        name = part.strip().upper()
        if not name:
            continue
        try:
            statuses.add(OrderStatus(name))
        except ValueError as exc:
            raise InvalidOrderQueryError(f"invalid order status: {part.strip()}") from exc
    return frozenset(statuses) or None


class ListOrders:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(
        self,
        session: UserSession | None,
        status: str | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
        order_origin: str | None = None,
        created_by_user_id: str | None = None,
        limit: int = 50,
        cursor: str | None = None,
    ) -> OrderListResponse:
        if not is_allowed(session, OrderAction.VIEW_ORDERS):
            # Customers may only list the orders they placed themselves.
            if session is None or (
                created_by_user_id is not None and created_by_user_id != str(session.user_id)
            ):
                raise PermissionDeniedError(OrderAction.VIEW_ORDERS)
            created_by_user_id = str(session.user_id)

        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise InvalidOrderQueryError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if created_from is not None and created_to is not None and created_from > created_to:
            raise InvalidOrderQueryError("created_from must not be after created_to")

        query = OrderQuery(
            statuses=parse_statuses(status),
            created_from=created_from,
            created_to=created_to,
            order_origin=order_origin,
            created_by_user_id=UserId(created_by_user_id) if created_by_user_id else None,
        )
        try:
            orders, next_cursor = self._order_repository.list_orders(
                query=query,
                limit=limit,
                cursor=cursor,
            )
        except InvalidCursorError as exc:
            raise InvalidOrderCursorError("invalid cursor") from exc

        return OrderListResponse(
            orders=[to_order_response(order) for order in orders],
            nextCursor=next_cursor,
        )


class CountPendingOrders:
    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, session: UserSession | None) -> PendingOrdersCountResponse:
        if not is_allowed(session, OrderAction.VIEW_ORDERS):
            raise PermissionDeniedError(OrderAction.VIEW_ORDERS)
        count = self._order_repository.count_by_status(OrderStatus.PENDING)
        record_pending_orders(count)
        return PendingOrdersCountResponse(count=count)
