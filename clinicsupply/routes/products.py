from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..deps import get_repositories, require_permission
from ..errors import NotFound
from ..permissions import Permission
from ..repositories import Repositories
from ..schemas import Identity, Product, ProductCreate, ProductUpdate, Role
from ..utils import sanitize_input

router = APIRouter(prefix="/api/products", tags=["products"])


def _matches(product: Product, needle: str) -> bool:
    haystack = " ".join([product.name, product.description, product.sku, product.category]).lower()
    return needle.lower() in haystack


@router.get("", response_model=List[Product])
def list_products(
    category: Optional[str] = Query(default=None),
    q: str = Query("", min_length=0, max_length=100),
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_PRODUCTS)),
):
    products = repos.products.get_by_category(category) if category else repos.products.get_all()
    if identity.role != Role.ADMIN:
        products = [p for p in products if p.is_active]
    needle = sanitize_input(q)
    if needle:
        products = [p for p in products if _matches(p, needle)]
    return sorted(products, key=lambda p: (p.category, p.name))


@router.get("/{product_id}", response_model=Product)
def get_product(
    product_id: str,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_PRODUCTS)),
):
    product = repos.products.get_by_id(product_id)
    if not product:
        raise NotFound("product not found")
    return product


@router.post("", response_model=Product, status_code=201)
def create_product(
    payload: ProductCreate,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_PRODUCTS)),
):
    return repos.products.create(payload)


@router.put("/{product_id}", response_model=Product)
def update_product(
    product_id: str,
    payload: ProductUpdate,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_PRODUCTS)),
):
    return repos.products.update(product_id, payload)


@router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: str,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_PRODUCTS)),
):
    repos.products.delete(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
