from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pizzeria.domain.common.ids import OrderId
from pizzeria.domain.common.money import Money
from pizzeria.domain.order.entities import OrderStatus


@dataclass(frozen=True)
class OrderPlaced:
    order_id: OrderId
    status: OrderStatus
    total: Money
    created_at: datetime


@dataclass(frozen=True)
class OrderStatusChanged:
    order_id: OrderId
    from_status: OrderStatus
    to_status: OrderStatus
    occurred_at: datetime
