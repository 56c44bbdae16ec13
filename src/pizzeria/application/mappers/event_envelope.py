from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from pizzeria.application.mappers.cart_mapper import cart_item_to_dict
from pizzeria.domain.order.entities import Order, OrderStatus


def _serialize_event(
    *,
    event_type: str,
    occurred_at: datetime,
    payload: dict[str, Any],
    trace_id: str | None,
    request_id: str | None,
) -> str:
    envelope = {
        "event_id": str(uuid4()),
        "event_type": event_type,
        "occurred_at": occurred_at.isoformat(),
        "request_id": request_id,
        "trace_id": trace_id,
        "payload": payload,
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def order_payload(order: Order, previous_status: OrderStatus | None = None) -> dict[str, Any]:
    return {
        "orderId": str(order.order_id),
        "status": order.status.value,
        "previousStatus": previous_status.value if previous_status is not None else None,
        "customerName": order.customer.name,
        "totalMoney": {
            "amountCents": order.total.amount_cents,
            "currency": order.total.currency,
        },
        "paymentMethod": order.payment.method.value,
        "orderOrigin": order.order_origin,
        "tableNumber": order.table_number,
        "createdAt": order.created_at.isoformat(),
        "updatedAt": order.updated_at.isoformat(),
        "items": [cart_item_to_dict(item) for item in order.items],
    }


def serialize_order_event(
    *,
    event_type: str,
    occurred_at: datetime,
    order: Order,
    trace_id: str | None,
    request_id: str | None,
    previous_status: OrderStatus | None = None,
) -> str:
    return _serialize_event(
        event_type=event_type,
        occurred_at=occurred_at,
        trace_id=trace_id,
        request_id=request_id,
        payload=order_payload(order, previous_status=previous_status),
    )


def serialize_new_order_highlight(
    *,
    occurred_at: datetime,
    payload: dict[str, Any],
) -> str:
    return _serialize_event(
        event_type="order.new",
        occurred_at=occurred_at,
        trace_id=None,
        request_id=None,
        payload=payload,
    )
