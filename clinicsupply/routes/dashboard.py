from typing import List

from fastapi import APIRouter, Depends, Query

from ..deps import get_repositories, require_permission
from ..order_status import order_status_style, status_label
from ..permissions import Permission
from ..repositories import Repositories
from ..schemas import Identity, RecentOrder, Role

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/recent-orders", response_model=List[RecentOrder])
def recent_orders(
    limit: int = Query(5, ge=1, le=50),
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_ORDERS)),
):
    if identity.role == Role.ADMIN:
        orders = repos.orders.get_all()
    else:
        orders = repos.orders.get_by_clinic(identity.clinic_id or "")
    orders = sorted(orders, key=lambda o: o.created_at.isoformat() if o.created_at else "", reverse=True)
    return [
        RecentOrder(
            id=o.id,
            clinic_id=o.clinic_id,
            status=o.status.value,
            label=status_label(o.status),
            status_style=order_status_style(o.status),
            total=o.total,
            created_at=o.created_at,
        )
        for o in orders[:limit]
    ]
