from __future__ import annotations

from typing import Any
from uuid import uuid4

from pizzeria.application.dto.requests import (
    BorderRequest,
    CartItemRequest,
    FlavorRequest,
    PizzaItemRequest,
    ProductItemRequest,
)
from pizzeria.application.dto.responses import CartItemResponse
from pizzeria.application.mappers.money import to_money_response
from pizzeria.domain.cart.entities import (
    Border,
    CartItem,
    Flavor,
    PizzaItem,
    PizzaSize,
    Product,
    ProductItem,
)
from pizzeria.domain.cart.pricing import UnsupportedCartItemError, item_label, line_total
from pizzeria.domain.common.ids import BorderId, CartLineId, FlavorId, ProductId
from pizzeria.domain.common.money import DEFAULT_CURRENCY, Money


def _line_id(raw: str | None) -> CartLineId:
    return CartLineId(raw or f"crt_{uuid4().hex[:12]}")


def _flavor_from_request(flavor: FlavorRequest) -> Flavor:
    return Flavor(
        flavor_id=FlavorId(flavor.id),
        name=flavor.name,
        prices={size: Money(amount_cents=cents) for size, cents in flavor.prices_cents.items()},
    )


def _border_from_request(border: BorderRequest) -> Border:
    prices = None
    if border.prices_cents is not None:
        prices = {size: Money(amount_cents=cents) for size, cents in border.prices_cents.items()}
    return Border(
        border_id=BorderId(border.id),
        name=border.name,
        price=Money(amount_cents=border.price_cents),
        prices=prices,
    )


def cart_item_from_request(item: CartItemRequest) -> CartItem:
    """Build a domain item keeping the unit price the client snapshotted."""
    if isinstance(item, PizzaItemRequest):
        return PizzaItem(
            line_id=_line_id(item.id),
            size=item.size,
            flavors=tuple(_flavor_from_request(flavor) for flavor in item.flavors),
            quantity=item.quantity,
            unit_price=Money(amount_cents=item.unit_price_cents),
            border=_border_from_request(item.border) if item.border is not None else None,
            note=item.note if item.note and item.note.strip() else None,
        )
    if isinstance(item, ProductItemRequest):
        return ProductItem(
            line_id=_line_id(item.id),
            product=Product(
                product_id=ProductId(item.product.id),
                name=item.product.name,
                price=Money(amount_cents=item.product.price_cents),
                category=item.product.category,
                drink_size_name=item.product.drink_size_name,
            ),
            quantity=item.quantity,
            unit_price=Money(amount_cents=item.unit_price_cents),
        )
    raise UnsupportedCartItemError(f"unsupported cart item request: {type(item).__name__}")


def _money_to_dict(money: Money) -> dict[str, Any]:
    return {"amountCents": money.amount_cents, "currency": money.currency}


def _money_from_dict(data: dict[str, Any]) -> Money:
    return Money(
        amount_cents=int(data["amountCents"]),
        currency=data.get("currency", DEFAULT_CURRENCY),
    )


def _prices_to_dict(prices: dict[PizzaSize, Money] | None) -> dict[str, Any] | None:
    if prices is None:
        return None
    return {size.value: _money_to_dict(money) for size, money in prices.items()}


def _prices_from_dict(data: dict[str, Any] | None) -> dict[PizzaSize, Money] | None:
    if data is None:
        return None
    return {PizzaSize(size): _money_from_dict(money) for size, money in data.items()}


def cart_item_to_dict(item: CartItem) -> dict[str, Any]:
    if isinstance(item, PizzaItem):
        return {
            "type": "pizza",
            "id": str(item.line_id),
            "size": item.size.value,
            "flavors": [
                {
                    "id": str(flavor.flavor_id),
                    "name": flavor.name,
                    "prices": _prices_to_dict(dict(flavor.prices)),
                }
                for flavor in item.flavors
            ],
            "border": (
                {
                    "id": str(item.border.border_id),
                    "name": item.border.name,
                    "price": _money_to_dict(item.border.price),
                    "prices": _prices_to_dict(
                        dict(item.border.prices) if item.border.prices is not None else None
                    ),
                }
                if item.border is not None
                else None
            ),
            "quantity": item.quantity,
            "unitPrice": _money_to_dict(item.unit_price),
            "note": item.note,
        }
    if isinstance(item, ProductItem):
        return {
            "type": "product",
            "id": str(item.line_id),
            "product": {
                "id": str(item.product.product_id),
                "name": item.product.name,
                "price": _money_to_dict(item.product.price),
                "category": item.product.category,
                "available": item.product.available,
                "drinkSizeName": item.product.drink_size_name,
            },
            "quantity": item.quantity,
            "unitPrice": _money_to_dict(item.unit_price),
        }
    raise UnsupportedCartItemError(f"unsupported cart item: {type(item).__name__}")


def cart_item_from_dict(data: dict[str, Any]) -> CartItem:
    item_type = data.get("type")
    if item_type == "pizza":
        border_data = data.get("border")
        return PizzaItem(
            line_id=CartLineId(data["id"]),
            size=PizzaSize(data["size"]),
            flavors=tuple(
                Flavor(
                    flavor_id=FlavorId(flavor["id"]),
                    name=flavor["name"],
                    prices=_prices_from_dict(flavor.get("prices")) or {},
                )
                for flavor in data["flavors"]
            ),
            quantity=int(data["quantity"]),
            unit_price=_money_from_dict(data["unitPrice"]),
            border=(
                Border(
                    border_id=BorderId(border_data["id"]),
                    name=border_data["name"],
                    price=_money_from_dict(border_data["price"]),
                    prices=_prices_from_dict(border_data.get("prices")),
                )
                if border_data
                else None
            ),
            note=data.get("note"),
        )
    if item_type == "product":
        product = data["product"]
        return ProductItem(
            line_id=CartLineId(data["id"]),
            product=Product(
                product_id=ProductId(product["id"]),
                name=product["name"],
                price=_money_from_dict(product["price"]),
                category=product["category"],
                available=bool(product.get("available", True)),
                drink_size_name=product.get("drinkSizeName"),
            ),
            quantity=int(data["quantity"]),
            unit_price=_money_from_dict(data["unitPrice"]),
        )
    raise UnsupportedCartItemError(f"unsupported cart item type: {item_type}")


def to_cart_item_response(item: CartItem) -> CartItemResponse:
    if isinstance(item, PizzaItem):
        size: str | None = item.size.value
        note = item.note
        item_type = "pizza"
    elif isinstance(item, ProductItem):
        size = None
        note = None
        item_type = "product"
    else:
        raise UnsupportedCartItemError(f"unsupported cart item: {type(item).__name__}")

    return CartItemResponse(
        lineId=str(item.line_id),
        type=item_type,
        label=item_label(item),
        quantity=item.quantity,
        unitPrice=to_money_response(item.unit_price),
        lineTotal=to_money_response(line_total(item)),
        size=size,
        note=note,
    )
