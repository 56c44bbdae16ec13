"""Order status graph and the side effects attached to each transition.

The functions here only validate and describe a transition. Persisting the
new status, publishing realtime events and handing the message key to the
messaging collaborator are done by the caller, after validation succeeds.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pizzeria.domain.common.ids import OrderId
from pizzeria.domain.order.entities import OrderStatus


class MessageType(str, Enum):
    ORDER_PENDING = "order_pending"
    ORDER_CONFIRMED = "order_confirmed"
    ORDER_PREPARING = "order_preparing"
    ORDER_READY = "order_ready"
    ORDER_OUT_FOR_DELIVERY = "order_out_for_delivery"
    ORDER_DELIVERED = "order_delivered"
    ORDER_CANCELLED = "order_cancelled"


TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
)

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset(
        {OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.CANCELLED}
    ),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset(
        {OrderStatus.READY, OrderStatus.DELIVERED, OrderStatus.CANCELLED}
    ),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

STATUS_MESSAGE_TYPES: dict[OrderStatus, MessageType] = {
    OrderStatus.PENDING: MessageType.ORDER_PENDING,
    OrderStatus.CONFIRMED: MessageType.ORDER_CONFIRMED,
    OrderStatus.PREPARING: MessageType.ORDER_PREPARING,
    OrderStatus.READY: MessageType.ORDER_READY,
    OrderStatus.DELIVERED: MessageType.ORDER_DELIVERED,
    OrderStatus.CANCELLED: MessageType.ORDER_CANCELLED,
}


class InvalidTransitionError(Exception):
    def __init__(self, from_status: OrderStatus, to_status: OrderStatus) -> None:
        super().__init__(
            f"cannot transition order from status={from_status.value} to status={to_status.value}"
        )
        self.from_status = from_status
        self.to_status = to_status

    @property
    def details(self) -> dict[str, str]:
        return {"fromStatus": self.from_status.value, "toStatus": self.to_status.value}


@dataclass(frozen=True)
class TransitionPlan:
    order_id: OrderId
    from_status: OrderStatus
    to_status: OrderStatus
    message_type: MessageType | None
    opens_messaging_link: bool = False
    cancels_payment_flow: bool = False
    is_noop: bool = False


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def allowed_transitions(status: OrderStatus) -> frozenset[OrderStatus]:
    return TRANSITIONS[status]


def can_transition(from_status: OrderStatus, to_status: OrderStatus) -> bool:
    return to_status in TRANSITIONS[from_status]


def message_type_for_status(status: OrderStatus) -> MessageType:
    return STATUS_MESSAGE_TYPES[status]


def plan_transition(
    order_id: OrderId,
    from_status: OrderStatus,
    to_status: OrderStatus,
    out_for_delivery: bool = False,
) -> TransitionPlan:
    if not can_transition(from_status, to_status):
        raise InvalidTransitionError(from_status, to_status)

    if to_status == OrderStatus.READY:
        return TransitionPlan(
            order_id=order_id,
            from_status=from_status,
            to_status=to_status,
            message_type=(
                MessageType.ORDER_OUT_FOR_DELIVERY if out_for_delivery else MessageType.ORDER_READY
            ),
            opens_messaging_link=True,
            is_noop=from_status == OrderStatus.READY,
        )

    if to_status == OrderStatus.PREPARING:
        # Kitchen-internal step, the customer is not notified.
        return TransitionPlan(
            order_id=order_id,
            from_status=from_status,
            to_status=to_status,
            message_type=None,
        )

    return TransitionPlan(
        order_id=order_id,
        from_status=from_status,
        to_status=to_status,
        message_type=STATUS_MESSAGE_TYPES[to_status],
        cancels_payment_flow=(
            to_status == OrderStatus.CANCELLED and from_status == OrderStatus.PENDING
        ),
    )
