from __future__ import annotations

import json
from datetime import datetime, timezone

from pizzeria.application.ports.messaging import MessagingGateway, PaymentFlowGateway
from pizzeria.domain.common.ids import OrderId
from pizzeria.domain.order.lifecycle import MessageType
from pizzeria.infrastructure.messaging.redis_client import get_redis_client

WHATSAPP_NOTIFICATIONS_CHANNEL = "notifications:whatsapp"
PAYMENT_CANCEL_CHANNEL = "payments:cancel"


def _command(**fields: str) -> str:
    payload = {**fields, "requested_at": datetime.now(timezone.utc).isoformat()}
    return json.dumps(payload, separators=(",", ":"))


class RedisMessagingGateway(MessagingGateway):
    """Publishes the message key; the WhatsApp worker renders and sends it."""

    def __init__(
        self,
        channel: str = WHATSAPP_NOTIFICATIONS_CHANNEL,
        timeout_seconds: float = 1.0,
    ) -> None:
        self._channel = channel
        self._timeout_seconds = timeout_seconds

    def dispatch(self, order_id: OrderId, message_type: MessageType) -> None:
        get_redis_client(timeout_seconds=self._timeout_seconds).publish(
            self._channel,
            _command(orderId=str(order_id), messageType=message_type.value),
        )


class RedisPaymentFlowGateway(PaymentFlowGateway):
    def __init__(
        self,
        channel: str = PAYMENT_CANCEL_CHANNEL,
        timeout_seconds: float = 1.0,
    ) -> None:
        self._channel = channel
        self._timeout_seconds = timeout_seconds

    def cancel(self, order_id: OrderId) -> None:
        get_redis_client(timeout_seconds=self._timeout_seconds).publish(
            self._channel,
            _command(orderId=str(order_id)),
        )
