from __future__ import annotations

import logging

from pizzeria.application.dto.responses import NotificationResponse
from pizzeria.application.ports.messaging import MessagingGateway
from pizzeria.application.ports.repositories import OrderRepository
from pizzeria.application.use_cases.get_order import OrderNotFoundError
from pizzeria.domain.auth.session import OrderAction, UserSession, ensure_allowed
from pizzeria.domain.common.ids import OrderId
from pizzeria.domain.order.lifecycle import message_type_for_status

logger = logging.getLogger(__name__)


class NotificationDispatchError(Exception):
    pass


class NotifyOrder:
    """Resend the customer message matching the order's current status."""

    def __init__(self, order_repository: OrderRepository, messaging: MessagingGateway) -> None:
        self._order_repository = order_repository
        self._messaging = messaging

    def execute(self, order_id: OrderId, session: UserSession | None) -> NotificationResponse:
        ensure_allowed(session, OrderAction.NOTIFY)
        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")

        message_type = message_type_for_status(order.status)
        try:
            self._messaging.dispatch(order.order_id, message_type)
        except Exception as exc:
            raise NotificationDispatchError(
                f"could not dispatch {message_type.value} for order {order_id}"
            ) from exc
        logger.info(
            "order_notification_sent",
            extra={"order_id": str(order.order_id), "message_type": message_type.value},
        )
        return NotificationResponse(orderId=str(order.order_id), messageType=message_type.value)
