from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_repositories, require_permission
from ..errors import NotFound
from ..inventory import clinic_inventory_stats, inventory_items, to_inventory_item
from ..permissions import Permission, ensure_clinic_access
from ..repositories import Repositories
from ..schemas import ClinicInventoryStats, Identity, InventoryItem, StockUpdate

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.get("", response_model=List[InventoryItem])
def global_inventory(
    low_stock: Optional[bool] = Query(default=None, alias="lowStock"),
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_GLOBAL_INVENTORY)),
):
    return inventory_items(repos.products.get_all(), low_stock_only=bool(low_stock))


@router.get("/stats", response_model=List[ClinicInventoryStats])
def inventory_stats(
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_GLOBAL_INVENTORY)),
):
    catalog = [p for p in repos.products.get_all() if p.is_active]
    clinics = sorted(repos.clinics.get_all(), key=lambda c: c.name)
    return [clinic_inventory_stats(c, catalog, repos.orders.get_by_clinic(c.id)) for c in clinics]


@router.get("/clinics/{clinic_id}", response_model=List[InventoryItem])
def clinic_inventory(
    clinic_id: str,
    low_stock: Optional[bool] = Query(default=None, alias="lowStock"),
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_INVENTORY)),
):
    ensure_clinic_access(identity, clinic_id)
    # clinics order from the shared catalog
    catalog = [p for p in repos.products.get_all() if p.is_active]
    return inventory_items(catalog, low_stock_only=bool(low_stock))


@router.patch("/{product_id}", response_model=InventoryItem)
def update_stock(
    product_id: str,
    payload: StockUpdate,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_INVENTORY)),
):
    if not repos.products.get_by_id(product_id):
        raise NotFound("product not found")
    return to_inventory_item(repos.products.update(product_id, {"quantity": payload.quantity}))
