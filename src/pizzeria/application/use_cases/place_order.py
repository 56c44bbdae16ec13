from __future__ import annotations

import logging
from uuid import uuid4

from pizzeria.application.dto.requests import PlaceOrderRequest
from pizzeria.application.dto.responses import OrderResponse
from pizzeria.application.mappers.availability_mapper import to_next_open_response
from pizzeria.application.mappers.cart_mapper import cart_item_from_request
from pizzeria.application.mappers.event_envelope import serialize_order_event
from pizzeria.application.mappers.order_mapper import to_order_response
from pizzeria.application.metrics.order_lifecycle import record_order_status
from pizzeria.application.metrics.store_availability import record_checkout_blocked
from pizzeria.application.ports.messaging import MessagingGateway
from pizzeria.application.ports.publisher import STORE_EVENTS_CHANNEL, EventPublisher
from pizzeria.application.ports.repositories import (
    OrderRepository,
    ScheduleRepository,
    SettingsRepository,
)
from pizzeria.application.use_cases.clock import Clock, utc_now
from pizzeria.application.use_cases.context import TraceContext
from pizzeria.application.use_cases.get_store_availability import GetStoreAvailability
from pizzeria.domain.auth.session import OrderAction, UserSession, ensure_allowed
from pizzeria.domain.cart.cart import Cart
from pizzeria.domain.cart.entities import CartItem
from pizzeria.domain.cart.pricing import listed_unit_price
from pizzeria.domain.common.ids import OrderId
from pizzeria.domain.common.money import Money
from pizzeria.domain.order.entities import (
    IN_STORE_ORIGIN,
    CustomerInfo,
    OrderStatus,
    PaymentInfo,
    create_order,
)
from pizzeria.domain.order.events import OrderPlaced
from pizzeria.domain.order.lifecycle import MessageType
from pizzeria.domain.schedule.entities import AvailabilityVerdict

logger = logging.getLogger(__name__)


class StoreClosedError(Exception):
    def __init__(self, verdict: AvailabilityVerdict) -> None:
        reason = verdict.reason.value if verdict.reason is not None else "closed"
        super().__init__(f"store is not accepting orders (reason={reason})")
        self.verdict = verdict

    @property
    def details(self) -> dict[str, object]:
        next_open = to_next_open_response(self.verdict.next_open_at)
        return {
            "reason": self.verdict.reason.value if self.verdict.reason is not None else None,
            "nextOpenAt": next_open.model_dump() if next_open is not None else None,
        }


class OrderTotalMismatchError(Exception):
    pass


class UnitPriceMismatchError(Exception):
    def __init__(self, lines: list[CartItem]) -> None:
        super().__init__("unit price does not match the item's own pricing")
        self.lines = lines

    @property
    def details(self) -> dict[str, object]:
        return {
            "lines": [
                {
                    "lineId": str(line.line_id),
                    "unitPriceCents": line.unit_price.amount_cents,
                    "expectedCents": listed_unit_price(line).amount_cents,
                }
                for line in self.lines
            ]
        }


class InvalidOrderRequestError(Exception):
    pass


class PlaceOrder:
    def __init__(
        self,
        order_repository: OrderRepository,
        schedule_repository: ScheduleRepository,
        settings_repository: SettingsRepository,
        publisher: EventPublisher,
        messaging: MessagingGateway,
        clock: Clock = utc_now,
        store_availability: GetStoreAvailability | None = None,
    ) -> None:
        self._order_repository = order_repository
        self._publisher = publisher
        self._messaging = messaging
        self._clock = clock
        self._store_availability = store_availability or GetStoreAvailability(
            schedule_repository=schedule_repository,
            settings_repository=settings_repository,
            clock=clock,
        )

    def execute(
        self,
        request_dto: PlaceOrderRequest,
        trace_ctx: TraceContext,
        session: UserSession | None = None,
    ) -> OrderResponse:
        if request_dto.order_origin == IN_STORE_ORIGIN:
            ensure_allowed(session, OrderAction.PLACE_IN_STORE)

        verdict = self._store_availability.evaluate()
        if not verdict.is_open_now:
            record_checkout_blocked(verdict)
            raise StoreClosedError(verdict)

        try:
            items = [cart_item_from_request(item) for item in request_dto.items]
            customer = CustomerInfo(
                name=request_dto.customer.name,
                phone=request_dto.customer.phone,
                address=request_dto.customer.address,
                street=_clean(request_dto.customer.street),
                number=_clean(request_dto.customer.number),
                neighborhood=_clean(request_dto.customer.neighborhood),
                reference=_clean(request_dto.customer.reference),
                complement=_clean(request_dto.customer.complement),
            )
            payment = PaymentInfo(
                method=request_dto.payment.method,
                needs_change=request_dto.payment.needs_change,
                change_for=(
                    Money(amount_cents=request_dto.payment.change_for_cents)
                    if request_dto.payment.change_for_cents is not None
                    else None
                ),
            )
        except ValueError as exc:
            raise InvalidOrderRequestError(str(exc)) from exc

        cart = Cart(items=tuple(items))
        mispriced = cart.mispriced_lines()
        if mispriced:
            raise UnitPriceMismatchError(mispriced)

        expected_total = cart.total()
        if expected_total.amount_cents != request_dto.total_cents:
            raise OrderTotalMismatchError(
                f"total {request_dto.total_cents} does not match item total "
                f"{expected_total.amount_cents}"
            )

        now = self._clock()
        order = create_order(
            order_id=OrderId(f"ord_{uuid4().hex[:12]}"),
            items=items,
            customer=customer,
            payment=payment,
            now=now,
            payment_confirmed=request_dto.payment_confirmed,
            order_origin=request_dto.order_origin,
            table_number=_clean(request_dto.table_number),
            created_by_user_id=session.user_id if session is not None else None,
        )
        self._order_repository.add(order)

        event = OrderPlaced(
            order_id=order.order_id,
            status=order.status,
            total=order.total,
            created_at=order.created_at,
        )
        record_order_status(order)
        logger.info(
            "order_placed",
            extra={
                "order_id": str(event.order_id),
                "to_status": event.status.value,
                "payment_method": order.payment.method.value,
            },
        )
        message = serialize_order_event(
            event_type="order.placed",
            occurred_at=event.created_at,
            order=order,
            trace_id=trace_ctx.trace_id,
            request_id=trace_ctx.request_id,
        )
        try:
            self._publisher.publish(channel=STORE_EVENTS_CHANNEL, message=message)
        except Exception:
            logger.exception("order_event_publish_failed", extra={"order_id": str(order.order_id)})

        if order.status == OrderStatus.CONFIRMED:
            try:
                self._messaging.dispatch(order.order_id, MessageType.ORDER_CONFIRMED)
            except Exception:
                logger.exception(
                    "order_notification_failed",
                    extra={
                        "order_id": str(order.order_id),
                        "message_type": MessageType.ORDER_CONFIRMED.value,
                    },
                )

        return to_order_response(order)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
