import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..cart import cart_to_order_items, order_total
from ..deps import Pagination, get_pagination, get_repositories, require_permission
from ..errors import BadRequest, Forbidden, NotFound
from ..order_status import can_transition
from ..permissions import Permission, ensure_clinic_access, has_permission
from ..repositories import Repositories, to_record
from ..schemas import (
    Checkout,
    Identity,
    Order,
    OrderCreate,
    OrderItem,
    OrderStatus,
    OrderStatusUpdate,
    OrderUpdate,
    Page,
    Role,
)
from ..utils import paginate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])

# statuses only an approver may move an order into
APPROVAL_STATUSES = {OrderStatus.APPROVED, OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED}


def get_order_or_404(repos: Repositories, identity: Identity, order_id: str) -> Order:
    order = repos.orders.get_by_id(order_id)
    if not order:
        raise NotFound("order not found")
    ensure_clinic_access(identity, order.clinic_id)
    return order


def _check_status_permission(identity: Identity, target: OrderStatus):
    if target in APPROVAL_STATUSES and not has_permission(identity.role, Permission.APPROVE_ORDERS):
        raise Forbidden("Insufficient permissions")


def _check_transition(order: Order, target: OrderStatus):
    if not can_transition(order.status, target):
        raise BadRequest(f"cannot move order from {order.status.value} to {target.value}")


@router.get("", response_model=Page[Order])
def list_orders(
    status_filter: Optional[OrderStatus] = Query(default=None, alias="status"),
    pagination: Pagination = Depends(get_pagination),
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_ORDERS)),
):
    if identity.role == Role.ADMIN:
        orders = repos.orders.get_by_status(status_filter) if status_filter else repos.orders.get_all()
    else:
        orders = repos.orders.get_by_clinic(identity.clinic_id or "")
        if status_filter:
            orders = [o for o in orders if o.status == status_filter]
    orders = sorted(orders, key=lambda o: o.created_at.isoformat() if o.created_at else "", reverse=True)
    return Page[Order](
        items=paginate(orders, pagination.page, pagination.limit),
        total=len(orders),
        page=pagination.page,
        limit=pagination.limit,
    )


@router.get("/{order_id}", response_model=Order)
def get_order(
    order_id: str,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_ORDERS)),
):
    return get_order_or_404(repos, identity, order_id)


@router.post("", response_model=Order, status_code=201)
def create_order(
    payload: OrderCreate,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.PLACE_ORDERS)),
):
    record = to_record(payload)
    ensure_clinic_access(identity, record["clinicId"])
    _check_status_permission(identity, payload.status)
    record.setdefault("userId", identity.id)
    record["total"] = order_total(payload.items)
    order = repos.orders.create(record)
    logger.info("order %s placed for clinic %s by %s", order.id, order.clinic_id, identity.id)
    return order


@router.post("/checkout", response_model=Order, status_code=201)
def checkout(
    payload: Checkout,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.PLACE_ORDERS)),
):
    clinic_id = str(payload.clinic_id)
    ensure_clinic_access(identity, clinic_id)
    items = cart_to_order_items(payload.items)
    order = repos.orders.create({
        "clinicId": clinic_id,
        "userId": identity.id,
        "status": OrderStatus.PENDING.value,
        "items": items,
        "total": order_total(OrderItem.model_validate(i) for i in items),
        "notes": payload.notes,
    })
    logger.info("checkout created order %s with %d lines", order.id, len(items))
    return order


@router.put("/{order_id}", response_model=Order)
def update_order(
    order_id: str,
    payload: OrderUpdate,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.PLACE_ORDERS)),
):
    order = get_order_or_404(repos, identity, order_id)
    changes = to_record(payload, partial=True)
    if "clinicId" in changes:
        ensure_clinic_access(identity, changes["clinicId"])
    if payload.status is not None and payload.status != order.status:
        _check_status_permission(identity, payload.status)
        _check_transition(order, payload.status)
    if payload.items is not None:
        changes["total"] = order_total(payload.items)
    return repos.orders.update(order_id, changes)


@router.patch("/{order_id}/status", response_model=Order)
def set_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_ORDERS)),
):
    order = get_order_or_404(repos, identity, order_id)
    _check_status_permission(identity, payload.status)
    _check_transition(order, payload.status)
    logger.info("order %s %s -> %s by %s", order_id, order.status.value, payload.status.value, identity.id)
    return repos.orders.update(order_id, {"status": payload.status.value})


@router.delete("/{order_id}", status_code=204)
def delete_order(
    order_id: str,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.DELETE_ORDERS)),
):
    repos.orders.delete(order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
