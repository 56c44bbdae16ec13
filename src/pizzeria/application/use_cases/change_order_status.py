from __future__ import annotations

import logging

from pizzeria.application.dto.responses import OrderTransitionResponse
from pizzeria.application.mappers.event_envelope import serialize_order_event
from pizzeria.application.mappers.order_mapper import to_transition_response
from pizzeria.application.metrics.order_lifecycle import (
    record_order_status,
    record_rejected_transition,
    record_time_to_deliver,
    record_time_to_ready,
    record_transition,
)
from pizzeria.application.ports.messaging import MessagingGateway, PaymentFlowGateway
from pizzeria.application.ports.publisher import STORE_EVENTS_CHANNEL, EventPublisher
from pizzeria.application.ports.repositories import OrderRepository, StaleOrderStatusError
from pizzeria.application.use_cases.clock import Clock, utc_now
from pizzeria.application.use_cases.context import TraceContext
from pizzeria.application.use_cases.get_order import OrderNotFoundError
from pizzeria.domain.auth.session import OrderAction, UserSession, ensure_allowed
from pizzeria.domain.common.ids import OrderId
from pizzeria.domain.order.entities import Order, OrderStatus
from pizzeria.domain.order.events import OrderStatusChanged
from pizzeria.domain.order.lifecycle import InvalidTransitionError, TransitionPlan, plan_transition

logger = logging.getLogger(__name__)

ACTION_TARGETS: dict[OrderAction, OrderStatus] = {
    OrderAction.CONFIRM_PAYMENT: OrderStatus.CONFIRMED,
    OrderAction.START_PREPARING: OrderStatus.PREPARING,
    OrderAction.MARK_OUT_FOR_DELIVERY: OrderStatus.READY,
    OrderAction.MARK_DELIVERED: OrderStatus.DELIVERED,
    OrderAction.CANCEL: OrderStatus.CANCELLED,
}


class InvalidOrderTransitionError(Exception):
    def __init__(self, from_status: OrderStatus, to_status: OrderStatus, message: str) -> None:
        super().__init__(message)
        self.from_status = from_status
        self.to_status = to_status

    @property
    def details(self) -> dict[str, str]:
        return {"fromStatus": self.from_status.value, "toStatus": self.to_status.value}


class OrderConflictError(Exception):
    pass


class UnsupportedOrderActionError(Exception):
    pass


class ChangeOrderStatus:
    def __init__(
        self,
        order_repository: OrderRepository,
        publisher: EventPublisher,
        messaging: MessagingGateway,
        payment_flows: PaymentFlowGateway,
        clock: Clock = utc_now,
    ) -> None:
        self._order_repository = order_repository
        self._publisher = publisher
        self._messaging = messaging
        self._payment_flows = payment_flows
        self._clock = clock

    def execute(
        self,
        order_id: OrderId,
        action: OrderAction,
        trace_ctx: TraceContext,
        session: UserSession | None = None,
        target_status: OrderStatus | None = None,
    ) -> OrderTransitionResponse:
        ensure_allowed(session, action)
        to_status = self._target_for(action, target_status)

        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")

        plan = self._plan(
            order,
            to_status,
            out_for_delivery=action == OrderAction.MARK_OUT_FOR_DELIVERY,
        )
        if plan.is_noop:
            return to_transition_response(order, plan)

        now = self._clock()
        try:
            updated = self._order_repository.update_status(
                order_id=order.order_id,
                from_status=plan.from_status,
                to_status=plan.to_status,
                now=now,
            )
        except StaleOrderStatusError as exc:
            current = self._order_repository.get(order_id)
            if current is None:
                raise OrderNotFoundError(f"order {order_id} not found") from exc
            raise OrderConflictError(
                f"order {order_id} status changed concurrently to {current.status.value}"
            ) from exc

        self._apply_side_effects(updated, plan, trace_ctx)
        return to_transition_response(updated, plan)

    def _target_for(self, action: OrderAction, target_status: OrderStatus | None) -> OrderStatus:
        if action == OrderAction.SET_STATUS:
            if target_status is None:
                raise UnsupportedOrderActionError("set_status requires a target status")
            return target_status
        if action not in ACTION_TARGETS:
            raise UnsupportedOrderActionError(f"action {action.value} does not change status")
        return ACTION_TARGETS[action]

    def _plan(self, order: Order, to_status: OrderStatus, out_for_delivery: bool) -> TransitionPlan:
        try:
            return plan_transition(
                order.order_id,
                order.status,
                to_status,
                out_for_delivery=out_for_delivery,
            )
        except InvalidTransitionError as exc:
            record_rejected_transition(exc.from_status, exc.to_status)
            logger.info(
                "order_transition_rejected",
                extra={
                    "order_id": str(order.order_id),
                    "from_status": exc.from_status.value,
                    "to_status": exc.to_status.value,
                },
            )
            raise InvalidOrderTransitionError(exc.from_status, exc.to_status, str(exc)) from exc

    def _apply_side_effects(
        self,
        order: Order,
        plan: TransitionPlan,
        trace_ctx: TraceContext,
    ) -> None:
        event = OrderStatusChanged(
            order_id=order.order_id,
            from_status=plan.from_status,
            to_status=plan.to_status,
            occurred_at=order.updated_at,
        )
        record_transition(from_status=event.from_status, to_status=event.to_status)
        record_order_status(order)
        if event.to_status == OrderStatus.READY:
            record_time_to_ready(order, now=event.occurred_at)
        elif event.to_status == OrderStatus.DELIVERED:
            record_time_to_deliver(order, now=event.occurred_at)

        logger.info(
            "order_status_changed",
            extra={
                "order_id": str(event.order_id),
                "from_status": event.from_status.value,
                "to_status": event.to_status.value,
                "message_type": plan.message_type.value if plan.message_type else None,
            },
        )

        if plan.cancels_payment_flow:
            try:
                self._payment_flows.cancel(order.order_id)
            except Exception:
                logger.exception(
                    "payment_flow_cancel_failed",
                    extra={"order_id": str(order.order_id)},
                )

        message = serialize_order_event(
            event_type="order.status_changed",
            occurred_at=event.occurred_at,
            order=order,
            trace_id=trace_ctx.trace_id,
            request_id=trace_ctx.request_id,
            previous_status=event.from_status,
        )
        try:
            self._publisher.publish(channel=STORE_EVENTS_CHANNEL, message=message)
        except Exception:
            logger.exception("order_event_publish_failed", extra={"order_id": str(order.order_id)})

        if plan.message_type is not None:
            try:
                self._messaging.dispatch(order.order_id, plan.message_type)
            except Exception:
                logger.exception(
                    "order_notification_failed",
                    extra={
                        "order_id": str(order.order_id),
                        "message_type": plan.message_type.value,
                    },
                )
