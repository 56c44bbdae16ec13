from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Sequence

from pizzeria.domain.cart.entities import CartItem
from pizzeria.domain.cart.pricing import items_total
from pizzeria.domain.common.ids import OrderId, UserId
from pizzeria.domain.common.money import Money

IN_STORE_ORIGIN = "in_store"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    READY = "READY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    PIX = "pix"
    CASH = "cash"
    CARD = "card"


@dataclass(frozen=True)
class CustomerInfo:
    name: str
    phone: str
    address: str
    street: str | None = None
    number: str | None = None
    neighborhood: str | None = None
    reference: str | None = None
    complement: str | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("customer name must be non-empty")
        if not self.phone.strip():
            raise ValueError("customer phone must be non-empty")


@dataclass(frozen=True)
class PaymentInfo:
    method: PaymentMethod
    needs_change: bool = False
    change_for: Money | None = None

    def __post_init__(self) -> None:
        if self.needs_change and self.method != PaymentMethod.CASH:
            raise ValueError("change can only be requested for cash payments")


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    items: tuple[CartItem, ...]
    customer: CustomerInfo
    payment: PaymentInfo
    status: OrderStatus
    total: Money
    created_at: datetime
    updated_at: datetime
    order_origin: str | None = None
    table_number: str | None = None
    created_by_user_id: UserId | None = None

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError("order must contain at least one item")
        expected_total = items_total(self.items, currency=self.total.currency)
        if self.total != expected_total:
            raise ValueError("order total must equal sum of item totals")

    def with_status(self, status: OrderStatus, now: datetime) -> Order:
        return replace(self, status=status, updated_at=now)


def initial_status(
    payment_method: PaymentMethod,
    payment_confirmed: bool = False,
    order_origin: str | None = None,
) -> OrderStatus:
    """Cash and card are settled on delivery; PIX waits for the payment ack."""
    if order_origin == IN_STORE_ORIGIN:
        return OrderStatus.CONFIRMED
    if payment_method == PaymentMethod.PIX and not payment_confirmed:
        return OrderStatus.PENDING
    return OrderStatus.CONFIRMED


def create_order(
    order_id: OrderId,
    items: Sequence[CartItem],
    customer: CustomerInfo,
    payment: PaymentInfo,
    now: datetime,
    payment_confirmed: bool = False,
    order_origin: str | None = None,
    table_number: str | None = None,
    created_by_user_id: UserId | None = None,
) -> Order:
    if not items:
        raise ValueError("order must contain at least one item")

    return Order(
        order_id=order_id,
        items=tuple(items),
        customer=customer,
        payment=payment,
        status=initial_status(payment.method, payment_confirmed, order_origin),
        total=items_total(items),
        created_at=now,
        updated_at=now,
        order_origin=order_origin,
        table_number=table_number,
        created_by_user_id=created_by_user_id,
    )
