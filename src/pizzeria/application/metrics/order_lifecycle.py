from __future__ import annotations

from datetime import datetime, timezone

from prometheus_client import Counter, Gauge, Histogram

from pizzeria.domain.order.entities import Order, OrderStatus

ORDERS_TOTAL = Counter(
    "pizzeria_orders_total",
    "Total number of orders observed by status.",
    ["status", "payment_method"],
)

ORDER_TRANSITION_TOTAL = Counter(
    "pizzeria_order_transition_total",
    "Total number of order lifecycle transitions.",
    ["from", "to"],
)

ORDER_TRANSITION_REJECTED_TOTAL = Counter(
    "pizzeria_order_transition_rejected_total",
    "Total number of rejected order lifecycle transitions.",
    ["from", "to"],
)

ORDER_TIME_TO_READY_SECONDS = Histogram(
    "pizzeria_order_time_to_ready_seconds",
    "Time between order creation and leaving for delivery.",
)

ORDER_TIME_TO_DELIVER_SECONDS = Histogram(
    "pizzeria_order_time_to_deliver_seconds",
    "Time between order creation and delivery.",
)

PENDING_ORDERS = Gauge(
    "pizzeria_pending_orders",
    "Number of orders awaiting payment at the last count.",
)

NEW_ORDER_HIGHLIGHTS_TOTAL = Counter(
    "pizzeria_new_order_highlights_total",
    "Total number of orders highlighted as new on the realtime feed.",
)


def record_order_status(order: Order) -> None:
    ORDERS_TOTAL.labels(
        status=order.status.value,
        payment_method=order.payment.method.value,
    ).inc()


def record_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_rejected_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_REJECTED_TOTAL.labels(
        **{"from": from_status.value, "to": to_status.value}
    ).inc()


def record_time_to_ready(order: Order, now: datetime | None = None) -> None:
    current = now or datetime.now(timezone.utc)
    ORDER_TIME_TO_READY_SECONDS.observe(max((current - order.created_at).total_seconds(), 0.0))


def record_time_to_deliver(order: Order, now: datetime | None = None) -> None:
    current = now or datetime.now(timezone.utc)
    ORDER_TIME_TO_DELIVER_SECONDS.observe(max((current - order.created_at).total_seconds(), 0.0))


def record_pending_orders(count: int) -> None:
    PENDING_ORDERS.set(count)


def record_new_order_highlight() -> None:
    NEW_ORDER_HIGHLIGHTS_TOTAL.inc()
