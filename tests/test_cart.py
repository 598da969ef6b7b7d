from decimal import Decimal

from clinicsupply.cart import (
    TEMPLATE_MAX_QUANTITY,
    add_to_cart,
    cart_to_order_items,
    cart_total,
    change_quantity,
    merge_cart,
    order_total,
    remove_from_cart,
    round_amount,
    set_quantity,
    template_to_cart,
)
from clinicsupply.schemas import CartItem, OrderItem, OrderTemplate, Product


def gauze(quantity=3):
    return Product(id="p1", name="Gauze", category="Wound Care", sku="WC-1", price=2.5, quantity=quantity)


def test_round_amount_half_up():
    assert round_amount("10.125") == Decimal("10.13")
    assert round_amount(0.005) == Decimal("0.01")
    assert round_amount(2) == Decimal("2.00")


def test_order_total_from_items():
    items = [
        OrderItem(product_id="p1", quantity=3, price=0.1),
        OrderItem(product_id="p2", quantity=1, price=10.125),
    ]
    assert order_total(items) == 10.43
    assert order_total([]) == 0.0


def test_add_to_cart_caps_at_stock():
    cart = add_to_cart([], gauze())
    assert [(i.id, i.quantity, i.max_quantity) for i in cart] == [("p1", 1, 3)]
    for _ in range(5):
        cart = add_to_cart(cart, gauze())
    assert cart[0].quantity == 3


def test_add_out_of_stock_product_is_ignored():
    assert add_to_cart([], gauze(quantity=0)) == []


def test_change_quantity_is_clamped():
    cart = [CartItem(id="p1", name="Gauze", quantity=2, price=2.5, max_quantity=4)]
    assert change_quantity(cart, "p1", 10)[0].quantity == 4
    assert change_quantity(cart, "p1", -10)[0].quantity == 0
    assert change_quantity(cart, "missing", 1) == cart
    # input is left alone
    assert cart[0].quantity == 2


def test_set_and_remove():
    cart = [
        CartItem(id="p1", name="Gauze", quantity=2, price=2.5, max_quantity=4),
        CartItem(id="p2", name="Swabs", quantity=1, price=0.2),
    ]
    assert set_quantity(cart, "p1", 9)[0].quantity == 4
    assert set_quantity(cart, "p1", -3)[0].quantity == 0
    assert [i.id for i in remove_from_cart(cart, "p1")] == ["p2"]
    assert cart_total(cart) == 5.2


def test_template_expansion():
    template = OrderTemplate.model_validate({
        "id": "t1",
        "clinicId": "c1",
        "name": "Weekly",
        "items": [
            {"productId": "p1", "name": "Gauze", "defaultQuantity": 4, "price": 2.5},
            {"productId": "p2", "name": "Swabs", "defaultQuantity": 10, "price": 0.2},
            {"productId": "p3", "name": "Masks", "defaultQuantity": 2, "price": 1.0},
        ],
    })
    lines = template_to_cart(template, {"p2": 0, "p3": 500})

    assert [(l.id, l.quantity) for l in lines] == [("p1", 4), ("p3", TEMPLATE_MAX_QUANTITY)]
    assert all(l.max_quantity == TEMPLATE_MAX_QUANTITY for l in lines)


def test_merge_cart_adds_to_existing_lines():
    cart = [CartItem(id="p1", name="Gauze", quantity=98, price=2.5)]
    incoming = [
        CartItem(id="p1", name="Gauze", quantity=5, price=2.5),
        CartItem(id="p2", name="Swabs", quantity=1, price=0.2),
    ]
    merged = merge_cart(cart, incoming)
    assert [(i.id, i.quantity) for i in merged] == [("p1", 100), ("p2", 1)]


def test_cart_to_order_items_drops_empty_lines():
    cart = [
        CartItem(id="p1", name="Gauze", quantity=0, price=2.5),
        CartItem(id="p2", name="Swabs", quantity=3, price=0.2),
    ]
    assert cart_to_order_items(cart) == [{"productId": "p2", "name": "Swabs", "quantity": 3, "price": 0.2}]
