from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence
from uuid import uuid4

from pizzeria.domain.cart.entities import (
    Border,
    CartItem,
    Flavor,
    PizzaItem,
    PizzaSize,
    Product,
    ProductItem,
)
from pizzeria.domain.cart.pricing import items_total, listed_unit_price, pizza_unit_price
from pizzeria.domain.common.ids import CartLineId
from pizzeria.domain.common.money import Money


class ProductUnavailableError(Exception):
    pass


def _new_line_id() -> CartLineId:
    return CartLineId(f"crt_{uuid4().hex[:12]}")


@dataclass(frozen=True)
class Cart:
    """Immutable cart. Unit prices are captured when an item is added.

    Checkout rebuilds the submitted lines as a Cart so the order total and
    each snapshotted unit price are checked against the same pricing rules.
    """

    items: tuple[CartItem, ...] = ()

    def add_pizza(
        self,
        size: PizzaSize,
        flavors: Sequence[Flavor],
        border: Border | None = None,
        line_id: CartLineId | None = None,
    ) -> Cart:
        item = PizzaItem(
            line_id=line_id or _new_line_id(),
            size=size,
            flavors=tuple(flavors),
            quantity=1,
            unit_price=pizza_unit_price(size, flavors, border),
            border=border,
        )
        return replace(self, items=self.items + (item,))

    def add_product(
        self,
        product: Product,
        quantity: int = 1,
        line_id: CartLineId | None = None,
    ) -> Cart:
        if not product.available:
            raise ProductUnavailableError(f"product {product.product_id} is unavailable")

        for index, item in enumerate(self.items):
            if isinstance(item, ProductItem) and item.product.product_id == product.product_id:
                merged = replace(item, quantity=item.quantity + quantity)
                return self._replace_at(index, merged)

        item = ProductItem(
            line_id=line_id or _new_line_id(),
            product=product,
            quantity=quantity,
            unit_price=product.price,
        )
        return replace(self, items=self.items + (item,))

    def remove(self, index: int) -> Cart:
        if not 0 <= index < len(self.items):
            return self
        return replace(self, items=self.items[:index] + self.items[index + 1 :])

    def update_quantity(self, index: int, quantity: int) -> Cart:
        if quantity <= 0:
            return self.remove(index)
        if not 0 <= index < len(self.items):
            return self
        return self._replace_at(index, replace(self.items[index], quantity=quantity))

    def update_pizza_note(self, index: int, note: str) -> Cart:
        if not 0 <= index < len(self.items):
            return self
        item = self.items[index]
        if not isinstance(item, PizzaItem):
            return self
        return self._replace_at(index, replace(item, note=note if note.strip() else None))

    def clear(self) -> Cart:
        return Cart()

    def total(self) -> Money:
        return items_total(self.items)

    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def mispriced_lines(self) -> list[CartItem]:
        return [item for item in self.items if item.unit_price != listed_unit_price(item)]

    def _replace_at(self, index: int, item: CartItem) -> Cart:
        items = list(self.items)
        items[index] = item
        return replace(self, items=tuple(items))
