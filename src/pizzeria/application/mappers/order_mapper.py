from __future__ import annotations

from pizzeria.application.dto.responses import (
    CustomerResponse,
    OrderResponse,
    OrderTransitionResponse,
    PaymentResponse,
)
from pizzeria.application.mappers.cart_mapper import to_cart_item_response
from pizzeria.application.mappers.money import to_money_response
from pizzeria.domain.order.entities import Order
from pizzeria.domain.order.lifecycle import TransitionPlan


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        orderId=str(order.order_id),
        status=order.status.value,
        items=[to_cart_item_response(item) for item in order.items],
        customer=CustomerResponse(
            name=order.customer.name,
            phone=order.customer.phone,
            address=order.customer.address,
            street=order.customer.street,
            number=order.customer.number,
            neighborhood=order.customer.neighborhood,
            reference=order.customer.reference,
            complement=order.customer.complement,
        ),
        payment=PaymentResponse(
            method=order.payment.method.value,
            needsChange=order.payment.needs_change,
            changeFor=(
                to_money_response(order.payment.change_for)
                if order.payment.change_for is not None
                else None
            ),
        ),
        total=to_money_response(order.total),
        orderOrigin=order.order_origin,
        tableNumber=order.table_number,
        createdByUserId=str(order.created_by_user_id) if order.created_by_user_id else None,
        createdAt=order.created_at,
        updatedAt=order.updated_at,
    )


def to_transition_response(order: Order, plan: TransitionPlan) -> OrderTransitionResponse:
    return OrderTransitionResponse(
        order=to_order_response(order),
        fromStatus=plan.from_status.value,
        toStatus=plan.to_status.value,
        changed=not plan.is_noop,
        messageType=plan.message_type.value if plan.message_type is not None else None,
        opensMessagingLink=plan.opens_messaging_link,
        cancelsPaymentFlow=plan.cancels_payment_flow,
    )
