from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Union

from pizzeria.domain.common.ids import BorderId, CartLineId, FlavorId, ProductId
from pizzeria.domain.common.money import Money

MAX_FLAVORS_PER_PIZZA = 2


class PizzaSize(str, Enum):
    P = "P"
    M = "M"
    G = "G"
    GG = "GG"


@dataclass(frozen=True)
class Flavor:
    flavor_id: FlavorId
    name: str
    prices: Mapping[PizzaSize, Money] = field(default_factory=dict)

    def price_for(self, size: PizzaSize) -> Money | None:
        return self.prices.get(size)


@dataclass(frozen=True)
class Border:
    border_id: BorderId
    name: str
    price: Money
    prices: Mapping[PizzaSize, Money] | None = None

    def price_for(self, size: PizzaSize) -> Money:
        sized = (self.prices or {}).get(size)
        if sized is not None and sized.amount_cents > 0:
            return sized
        return self.price


@dataclass(frozen=True)
class Product:
    product_id: ProductId
    name: str
    price: Money
    category: str
    available: bool = True
    drink_size_name: str | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")


@dataclass(frozen=True)
class PizzaItem:
    line_id: CartLineId
    size: PizzaSize
    flavors: tuple[Flavor, ...]
    quantity: int
    unit_price: Money
    border: Border | None = None
    note: str | None = None

    def __post_init__(self) -> None:
        if not 1 <= len(self.flavors) <= MAX_FLAVORS_PER_PIZZA:
            raise ValueError(f"a pizza takes 1 to {MAX_FLAVORS_PER_PIZZA} flavors")
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")


@dataclass(frozen=True)
class ProductItem:
    line_id: CartLineId
    product: Product
    quantity: int
    unit_price: Money

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")


CartItem = Union[PizzaItem, ProductItem]
