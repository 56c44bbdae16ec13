from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from pizzeria.domain.cart.entities import MAX_FLAVORS_PER_PIZZA, PizzaSize
from pizzeria.domain.cash.entities import MovementType
from pizzeria.domain.order.entities import OrderStatus, PaymentMethod


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class FlavorRequest(CamelBaseModel):
    id: str
    name: str
    prices_cents: dict[PizzaSize, int] = Field(default_factory=dict)


class BorderRequest(CamelBaseModel):
    id: str
    name: str
    price_cents: int = Field(ge=0)
    prices_cents: dict[PizzaSize, int] | None = None


class ProductRequest(CamelBaseModel):
    id: str
    name: str
    price_cents: int = Field(ge=0)
    category: str
    drink_size_name: str | None = None


class PizzaItemRequest(CamelBaseModel):
    type: Literal["pizza"] = "pizza"
    id: str | None = None
    size: PizzaSize
    flavors: list[FlavorRequest] = Field(min_length=1, max_length=MAX_FLAVORS_PER_PIZZA)
    border: BorderRequest | None = None
    quantity: int = Field(ge=1)
    unit_price_cents: int = Field(ge=0)
    note: str | None = None


class ProductItemRequest(CamelBaseModel):
    type: Literal["product"] = "product"
    id: str | None = None
    product: ProductRequest
    quantity: int = Field(ge=1)
    unit_price_cents: int = Field(ge=0)


CartItemRequest = Annotated[
    Union[PizzaItemRequest, ProductItemRequest],
    Field(discriminator="type"),
]


class CustomerRequest(CamelBaseModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    address: str
    street: str | None = None
    number: str | None = None
    neighborhood: str | None = None
    reference: str | None = None
    complement: str | None = None


class PaymentRequest(CamelBaseModel):
    method: PaymentMethod
    needs_change: bool = False
    change_for_cents: int | None = Field(default=None, ge=0)


class PlaceOrderRequest(CamelBaseModel):
    items: list[CartItemRequest] = Field(min_length=1)
    customer: CustomerRequest
    payment: PaymentRequest
    total_cents: int = Field(ge=0)
    payment_confirmed: bool = False
    order_origin: str | None = None
    table_number: str | None = None


class SetOrderStatusRequest(CamelBaseModel):
    status: OrderStatus


class SetManualOpenRequest(CamelBaseModel):
    is_open: bool


class WeeklyHourRuleRequest(CamelBaseModel):
    day_of_week: int = Field(ge=0, le=6)
    is_closed: bool
    open_time: str | None = None
    close_time: str | None = None


class ReplaceWeeklyHoursRequest(CamelBaseModel):
    hours: list[WeeklyHourRuleRequest] = Field(max_length=7)


class DateExceptionRequest(CamelBaseModel):
    is_closed: bool
    open_time: str | None = None
    close_time: str | None = None
    note: str | None = None


class OpenCashShiftRequest(CamelBaseModel):
    opening_balance_cents: int = Field(default=0, ge=0)
    note: str | None = Field(default=None, max_length=500)


class CashMovementRequest(CamelBaseModel):
    type: MovementType
    amount_cents: int = Field(gt=0)
    note: str | None = Field(default=None, max_length=500)


class CloseCashShiftRequest(CamelBaseModel):
    closing_balance_cents: int = Field(ge=0)
    note: str | None = Field(default=None, max_length=500)
