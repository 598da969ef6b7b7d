"""Cart arithmetic and template expansion.

Carts are plain lists of ``CartItem``; every function returns a new list and
leaves its input alone.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Union

from .schemas import CartItem, OrderTemplate, Product

# Lines expanded from a template are capped at this quantity.
TEMPLATE_MAX_QUANTITY = 100

Number = Union[int, float, Decimal]


# Business rule: amounts rounded to 2 decimals, half up

def round_amount(value: Number) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def order_total(items: Iterable) -> float:
    """Sum of quantity x price for anything with those two attributes."""
    total = sum((Decimal(str(item.price)) * item.quantity for item in items), Decimal("0"))
    return float(round_amount(total))


def cart_total(cart: List[CartItem]) -> float:
    return order_total(cart)


def _find(cart: List[CartItem], item_id: str) -> Optional[CartItem]:
    return next((item for item in cart if item.id == item_id), None)


def _replace(cart: List[CartItem], item_id: str, quantity: int) -> List[CartItem]:
    return [item.model_copy(update={"quantity": quantity}) if item.id == item_id else item for item in cart]


def add_to_cart(cart: List[CartItem], product: Product) -> List[CartItem]:
    """Add one unit, never beyond the stock on hand."""
    existing = _find(cart, product.id)
    if existing:
        return _replace(cart, product.id, min(existing.quantity + 1, product.quantity))
    if product.quantity <= 0:
        return list(cart)
    return list(cart) + [
        CartItem(
            id=product.id,
            name=product.name,
            quantity=1,
            price=product.price,
            max_quantity=product.quantity,
            description=product.description or None,
            sku=product.sku,
        )
    ]


def change_quantity(cart: List[CartItem], item_id: str, delta: int) -> List[CartItem]:
    item = _find(cart, item_id)
    if item is None:
        return list(cart)
    return _replace(cart, item_id, max(0, min(item.max_quantity, item.quantity + delta)))


def set_quantity(cart: List[CartItem], item_id: str, value: int) -> List[CartItem]:
    item = _find(cart, item_id)
    if item is None:
        return list(cart)
    return _replace(cart, item_id, max(0, min(value, item.max_quantity)))


def remove_from_cart(cart: List[CartItem], item_id: str) -> List[CartItem]:
    return [item for item in cart if item.id != item_id]


def template_to_cart(template: OrderTemplate, quantities: Optional[Dict[str, int]] = None) -> List[CartItem]:
    """Expand a template into cart lines.

    ``quantities`` maps productId to the chosen quantity; products left out
    use the template's default quantity and a chosen quantity of zero drops
    the line.
    """
    quantities = quantities or {}
    lines = []
    for item in template.items:
        quantity = quantities.get(item.product_id, item.default_quantity)
        if quantity <= 0:
            continue
        lines.append(
            CartItem(
                id=item.product_id,
                name=item.name,
                quantity=min(quantity, TEMPLATE_MAX_QUANTITY),
                price=item.price,
                max_quantity=TEMPLATE_MAX_QUANTITY,
            )
        )
    return lines


def merge_cart(cart: List[CartItem], incoming: Iterable[CartItem]) -> List[CartItem]:
    merged = list(cart)
    for line in incoming:
        existing = _find(merged, line.id)
        if existing:
            merged = _replace(merged, line.id, min(existing.quantity + line.quantity, existing.max_quantity))
        else:
            merged.append(line)
    return merged


def cart_to_order_items(cart: List[CartItem]) -> List[dict]:
    return [
        {"productId": item.id, "name": item.name, "quantity": item.quantity, "price": item.price}
        for item in cart
        if item.quantity > 0
    ]
