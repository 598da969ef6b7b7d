"""Inventory views over catalog products."""
from collections import defaultdict
from typing import Iterable, List

from .cart import round_amount
from .schemas import (
    Clinic,
    ClinicInventoryStats,
    InventoryItem,
    MostOrderedItem,
    Order,
    OrderStatus,
    Product,
)

LOW_STOCK = "Low Stock"
IN_STOCK = "In Stock"


def stock_status(quantity: int, reorder_point: int) -> str:
    return LOW_STOCK if quantity <= reorder_point else IN_STOCK


def to_inventory_item(product: Product) -> InventoryItem:
    # the reorder point is the product's minimum-stock threshold
    return InventoryItem(
        **product.model_dump(),
        reorder_point=product.min_stock,
        status=stock_status(product.quantity, product.min_stock),
    )


def inventory_items(products: Iterable[Product], low_stock_only: bool = False) -> List[InventoryItem]:
    items = [to_inventory_item(p) for p in products]
    if low_stock_only:
        items = [i for i in items if i.status == LOW_STOCK]
    return sorted(items, key=lambda i: (i.category, i.name))


def most_ordered_items(orders: Iterable[Order], top: int = 5) -> List[MostOrderedItem]:
    quantities = defaultdict(int)
    names = {}
    for order in orders:
        if order.status == OrderStatus.CANCELLED:
            continue
        for item in order.items:
            quantities[item.product_id] += item.quantity
            names.setdefault(item.product_id, item.name)
    ranked = sorted(quantities.items(), key=lambda kv: (-kv[1], names[kv[0]]))
    return [MostOrderedItem(item_id=pid, item_name=names[pid], quantity=qty) for pid, qty in ranked[:top]]


def clinic_inventory_stats(clinic: Clinic, products: List[Product], orders: List[Order]) -> ClinicInventoryStats:
    items = [to_inventory_item(p) for p in products]
    value = sum(round_amount(i.price) * i.quantity for i in items)
    return ClinicInventoryStats(
        clinic_id=clinic.id,
        clinic_name=clinic.name,
        total_items=len(items),
        low_stock_items=sum(1 for i in items if i.status == LOW_STOCK),
        total_order_value=float(round_amount(value)),
        most_ordered_items=most_ordered_items(orders),
    )
