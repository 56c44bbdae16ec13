from __future__ import annotations

from typing import Protocol

from pizzeria.domain.common.ids import OrderId
from pizzeria.domain.order.lifecycle import MessageType


class MessagingGateway(Protocol):
    """Hands a message key to the collaborator that renders and delivers it."""

    def dispatch(self, order_id: OrderId, message_type: MessageType) -> None: ...


class PaymentFlowGateway(Protocol):
    def cancel(self, order_id: OrderId) -> None: ...
