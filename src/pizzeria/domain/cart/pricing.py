from __future__ import annotations

from typing import Iterable, Sequence

from pizzeria.domain.cart.entities import (
    Border,
    CartItem,
    Flavor,
    PizzaItem,
    PizzaSize,
    ProductItem,
)
from pizzeria.domain.common.money import DEFAULT_CURRENCY, Money


class UnsupportedCartItemError(TypeError):
    pass


def pizza_unit_price(
    size: PizzaSize,
    flavors: Sequence[Flavor],
    border: Border | None = None,
) -> Money:
    """Price of one pizza: the priciest flavor for the size plus the border."""
    flavor_prices = [
        price for price in (flavor.price_for(size) for flavor in flavors) if price is not None
    ]
    if flavor_prices:
        price = max(flavor_prices, key=lambda money: money.amount_cents)
    else:
        price = Money.zero()
    if border is not None:
        price = price + border.price_for(size)
    return price


def listed_unit_price(item: CartItem) -> Money:
    """Unit price implied by the item's own flavors, border or product."""
    if isinstance(item, PizzaItem):
        return pizza_unit_price(item.size, item.flavors, item.border)
    if isinstance(item, ProductItem):
        return item.product.price
    raise UnsupportedCartItemError(f"unsupported cart item: {type(item).__name__}")


def line_total(item: CartItem) -> Money:
    if isinstance(item, PizzaItem):
        return item.unit_price.times(item.quantity)
    if isinstance(item, ProductItem):
        return item.unit_price.times(item.quantity)
    raise UnsupportedCartItemError(f"unsupported cart item: {type(item).__name__}")


def items_total(items: Iterable[CartItem], currency: str = DEFAULT_CURRENCY) -> Money:
    total = Money.zero(currency)
    for item in items:
        total = total + line_total(item)
    return total


def item_label(item: CartItem) -> str:
    if isinstance(item, PizzaItem):
        flavors = " + ".join(flavor.name for flavor in item.flavors)
        label = f"Pizza {flavors} ({item.size.value})"
        if item.border is not None:
            label = f"{label} c/ borda {item.border.name}"
        return f"{label} x{item.quantity}"
    if isinstance(item, ProductItem):
        name = item.product.name
        if item.product.drink_size_name:
            name = f"{name} ({item.product.drink_size_name})"
        return f"{name} x{item.quantity}"
    raise UnsupportedCartItemError(f"unsupported cart item: {type(item).__name__}")
