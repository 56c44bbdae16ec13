from __future__ import annotations

import base64
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Engine, and_, func, or_, select, update
from sqlalchemy.orm import Session

from pizzeria.application.mappers.cart_mapper import cart_item_from_dict, cart_item_to_dict
from pizzeria.application.ports.repositories import (
    InvalidCursorError,
    OrderQuery,
    OrderRepository,
    StaleOrderStatusError,
)
from pizzeria.domain.common.ids import OrderId, UserId
from pizzeria.domain.common.money import Money
from pizzeria.domain.order.entities import (
    CustomerInfo,
    Order,
    OrderStatus,
    PaymentInfo,
    PaymentMethod,
)
from pizzeria.infrastructure.db.models.order import OrderModel
from pizzeria.infrastructure.db.session import get_engine

_CUSTOMER_DETAIL_FIELDS = ("street", "number", "neighborhood", "reference", "complement")


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def add(self, order: Order) -> None:
        with Session(self._engine) as session:
            session.add(self._to_model(order))
            session.commit()

    def get(self, order_id: OrderId) -> Order | None:
        statement = select(OrderModel).where(OrderModel.id == str(order_id)).limit(1)
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return self._to_domain(model)

    def update_status(
        self,
        order_id: OrderId,
        from_status: OrderStatus,
        to_status: OrderStatus,
        now: datetime,
    ) -> Order:
        statement = (
            update(OrderModel)
            .where(
                OrderModel.id == str(order_id),
                OrderModel.status == from_status.value,
            )
            .values(status=to_status.value, updated_at=now)
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                raise StaleOrderStatusError(
                    f"order {order_id} is no longer in status={from_status.value}"
                )
            session.commit()

        updated = self.get(order_id)
        if updated is None:
            raise RuntimeError(f"order {order_id} not found after status update")
        return updated

    def list_orders(
        self,
        query: OrderQuery,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Order], str | None]:
        statement = select(OrderModel)
        if query.statuses:
            statement = statement.where(
                OrderModel.status.in_(sorted(status.value for status in query.statuses))
            )
        if query.created_from is not None:
            statement = statement.where(OrderModel.created_at >= query.created_from)
        if query.created_to is not None:
            statement = statement.where(OrderModel.created_at <= query.created_to)
        if query.order_origin is not None:
            statement = statement.where(OrderModel.order_origin == query.order_origin)
        if query.created_by_user_id is not None:
            statement = statement.where(
                OrderModel.created_by_user_id == str(query.created_by_user_id)
            )

        cursor_parts = _decode_cursor(cursor) if cursor else None
        if cursor_parts is not None:
            cursor_created_at, cursor_order_id = cursor_parts
            statement = statement.where(
                or_(
                    OrderModel.created_at < cursor_created_at,
                    and_(
                        OrderModel.created_at == cursor_created_at,
                        OrderModel.id < cursor_order_id,
                    ),
                )
            )

        statement = statement.order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).limit(
            limit + 1
        )

        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
            has_more = len(models) > limit
            page_models = models[:limit]
            orders = [self._to_domain(model) for model in page_models]

        next_cursor: str | None = None
        if has_more and orders:
            last = orders[-1]
            next_cursor = _encode_cursor(last.created_at, str(last.order_id))
        return orders, next_cursor

    def count_by_status(self, status: OrderStatus) -> int:
        statement = (
            select(func.count()).select_from(OrderModel).where(OrderModel.status == status.value)
        )
        with Session(self._engine) as session:
            return int(session.execute(statement).scalar_one())

    def _to_model(self, order: Order) -> OrderModel:
        details = {
            field: getattr(order.customer, field)
            for field in _CUSTOMER_DETAIL_FIELDS
            if getattr(order.customer, field) is not None
        }
        return OrderModel(
            id=str(order.order_id),
            status=order.status.value,
            items=[cart_item_to_dict(item) for item in order.items],
            customer_name=order.customer.name,
            customer_phone=order.customer.phone,
            customer_address=order.customer.address,
            customer_details=details or None,
            payment_method=order.payment.method.value,
            needs_change=order.payment.needs_change,
            change_for_cents=(
                order.payment.change_for.amount_cents
                if order.payment.change_for is not None
                else None
            ),
            total_cents=order.total.amount_cents,
            currency=order.total.currency,
            order_origin=order.order_origin,
            table_number=order.table_number,
            created_by_user_id=(
                str(order.created_by_user_id) if order.created_by_user_id is not None else None
            ),
            created_at=order.created_at,
            updated_at=order.updated_at,
        )

    def _to_domain(self, model: OrderModel) -> Order:
        details: dict[str, Any] = model.customer_details or {}
        return Order(
            order_id=OrderId(model.id),
            items=tuple(cart_item_from_dict(item) for item in model.items),
            customer=CustomerInfo(
                name=model.customer_name,
                phone=model.customer_phone,
                address=model.customer_address,
                **{field: details.get(field) for field in _CUSTOMER_DETAIL_FIELDS},
            ),
            payment=PaymentInfo(
                method=PaymentMethod(model.payment_method),
                needs_change=model.needs_change,
                change_for=(
                    Money(amount_cents=model.change_for_cents, currency=model.currency)
                    if model.change_for_cents is not None
                    else None
                ),
            ),
            status=OrderStatus(model.status),
            total=Money(amount_cents=model.total_cents, currency=model.currency),
            created_at=_ensure_utc(model.created_at),
            updated_at=_ensure_utc(model.updated_at),
            order_origin=model.order_origin,
            table_number=model.table_number,
            created_by_user_id=(
                UserId(model.created_by_user_id) if model.created_by_user_id else None
            ),
        )


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _encode_cursor(created_at: datetime, order_id: str) -> str:
    payload = f"{created_at.isoformat()}|{order_id}"
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")


def _decode_cursor(cursor: str) -> tuple[datetime, str]:
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
        created_at_raw, order_id = raw.split("|", 1)
        return _ensure_utc(datetime.fromisoformat(created_at_raw)), order_id
    except Exception as exc:
        raise InvalidCursorError("invalid cursor") from exc
