"""Order lifecycle: badge styles and allowed status moves.

draft -> pending -> approved -> processing -> shipped -> delivered, with
cancelled reachable from any state before shipping.
"""
from typing import Union

from .schemas import OrderStatus

DEFAULT_STYLE = "text-gray-800 bg-gray-100"

STATUS_STYLES = {
    OrderStatus.DRAFT: "text-gray-600 bg-gray-100",
    OrderStatus.PENDING: "text-yellow-600 bg-yellow-100",
    OrderStatus.APPROVED: "text-blue-600 bg-blue-100",
    OrderStatus.PROCESSING: "text-indigo-600 bg-indigo-100",
    OrderStatus.SHIPPED: "text-purple-600 bg-purple-100",
    OrderStatus.DELIVERED: "text-green-600 bg-green-100",
    OrderStatus.CANCELLED: "text-red-600 bg-red-100",
}

TRANSITIONS = {
    OrderStatus.DRAFT: {OrderStatus.PENDING, OrderStatus.CANCELLED},
    OrderStatus.PENDING: {OrderStatus.APPROVED, OrderStatus.CANCELLED},
    OrderStatus.APPROVED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def _parse(status: Union[str, OrderStatus, None]):
    if isinstance(status, OrderStatus):
        return status
    try:
        return OrderStatus(str(status).strip().lower())
    except ValueError:
        return None


def order_status_style(status: Union[str, OrderStatus, None]) -> str:
    """CSS classes for a status badge; unknown statuses get the default style."""
    parsed = _parse(status)
    return STATUS_STYLES.get(parsed, DEFAULT_STYLE) if parsed else DEFAULT_STYLE


def status_label(status: Union[str, OrderStatus]) -> str:
    value = status.value if isinstance(status, OrderStatus) else str(status)
    return value[:1].upper() + value[1:]


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in TRANSITIONS[current]
