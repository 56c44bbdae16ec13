from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from pizzeria.domain.cart.cart import Cart, ProductUnavailableError
from pizzeria.domain.cart.entities import Border, Flavor, PizzaSize, Product
from pizzeria.domain.cart.pricing import item_label, pizza_unit_price
from pizzeria.domain.common.ids import BorderId, CartLineId, FlavorId, ProductId
from pizzeria.domain.common.money import Money

CALABRESA = Flavor(
    flavor_id=FlavorId("flv_calabresa"),
    name="Calabresa",
    prices={PizzaSize.M: Money(amount_cents=4500), PizzaSize.G: Money(amount_cents=5500)},
)
CAMARAO = Flavor(
    flavor_id=FlavorId("flv_camarao"),
    name="Camarao",
    prices={PizzaSize.M: Money(amount_cents=6200), PizzaSize.G: Money(amount_cents=7400)},
)
CATUPIRY = Border(
    border_id=BorderId("brd_catupiry"),
    name="Catupiry",
    price=Money(amount_cents=800),
    prices={PizzaSize.G: Money(amount_cents=1200), PizzaSize.M: Money(amount_cents=0)},
)
GUARANA = Product(
    product_id=ProductId("prd_guarana"),
    name="Guarana",
    price=Money(amount_cents=900),
    category="drinks",
    drink_size_name="2L",
)


def test_pizza_price_is_priciest_flavor() -> None:
    price = pizza_unit_price(PizzaSize.G, [CALABRESA, CAMARAO])
    assert price == Money(amount_cents=7400)


def test_border_uses_sized_price_then_falls_back_to_base() -> None:
    assert pizza_unit_price(PizzaSize.G, [CALABRESA], CATUPIRY) == Money(amount_cents=6700)
    # A zero sized price falls back to the flat border price.
    assert pizza_unit_price(PizzaSize.M, [CALABRESA], CATUPIRY) == Money(amount_cents=5300)


def test_flavor_without_price_for_size_counts_as_zero() -> None:
    assert pizza_unit_price(PizzaSize.GG, [CALABRESA]) == Money.zero()


def test_add_pizza_and_product_totals() -> None:
    cart = (
        Cart()
        .add_pizza(PizzaSize.G, [CALABRESA, CAMARAO], CATUPIRY, line_id=CartLineId("crt_1"))
        .add_product(GUARANA, quantity=2, line_id=CartLineId("crt_2"))
    )

    assert cart.total() == Money(amount_cents=8600 + 1800)
    assert cart.item_count() == 3


def test_same_product_is_merged() -> None:
    cart = Cart().add_product(GUARANA).add_product(GUARANA, quantity=2)

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 3


def test_unavailable_product_is_rejected() -> None:
    sold_out = Product(
        product_id=ProductId("prd_sold_out"),
        name="Suco",
        price=Money(amount_cents=700),
        category="drinks",
        available=False,
    )
    with pytest.raises(ProductUnavailableError):
        Cart().add_product(sold_out)


def test_too_many_flavors_are_rejected() -> None:
    with pytest.raises(ValueError):
        Cart().add_pizza(PizzaSize.G, [CALABRESA, CAMARAO, CALABRESA])


def test_remove_and_quantity_updates() -> None:
    cart = Cart().add_pizza(PizzaSize.M, [CALABRESA]).add_product(GUARANA)

    assert cart.update_quantity(0, 3).items[0].quantity == 3
    assert len(cart.update_quantity(0, 0).items) == 1
    assert cart.remove(5) == cart
    assert cart.remove(1).items == cart.items[:1]
    assert cart.clear().items == ()


def test_pizza_note_is_trimmed_to_none_when_blank() -> None:
    cart = Cart().add_pizza(PizzaSize.M, [CALABRESA]).add_product(GUARANA)

    noted = cart.update_pizza_note(0, "sem cebola")
    assert noted.items[0].note == "sem cebola"
    assert noted.update_pizza_note(0, "  ").items[0].note is None
    assert cart.update_pizza_note(1, "gelado") == cart


def test_item_labels() -> None:
    cart = (
        Cart()
        .add_pizza(PizzaSize.G, [CALABRESA, CAMARAO], CATUPIRY)
        .add_product(GUARANA, quantity=2)
    )

    assert item_label(cart.items[0]) == "Pizza Calabresa + Camarao (G) c/ borda Catupiry x1"
    assert item_label(cart.items[1]) == "Guarana (2L) x2"


def test_mispriced_lines_flags_tampered_unit_prices() -> None:
    cart = (
        Cart()
        .add_pizza(PizzaSize.G, [CALABRESA, CAMARAO], CATUPIRY, line_id=CartLineId("crt_1"))
        .add_product(GUARANA, line_id=CartLineId("crt_2"))
    )
    assert cart.mispriced_lines() == []

    pizza, drink = cart.items
    tampered = Cart(items=(replace(pizza, unit_price=Money(amount_cents=100)), drink))

    assert [line.line_id for line in tampered.mispriced_lines()] == [CartLineId("crt_1")]
