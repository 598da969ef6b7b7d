from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..cart import merge_cart, template_to_cart
from ..deps import get_repositories, require_permission
from ..errors import NotFound
from ..permissions import Permission, ensure_clinic_access
from ..repositories import Repositories, to_record
from ..schemas import (
    CartItem,
    Identity,
    OrderTemplate,
    Role,
    TemplateApply,
    TemplateCreate,
    TemplateUpdate,
)
from ..storage import utc_now

router = APIRouter(prefix="/api/templates", tags=["templates"])


def get_template_or_404(repos: Repositories, identity: Identity, template_id: str) -> OrderTemplate:
    template = repos.templates.get_by_id(template_id)
    if not template:
        raise NotFound("template not found")
    ensure_clinic_access(identity, template.clinic_id)
    return template


@router.get("", response_model=List[OrderTemplate])
def list_templates(
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_TEMPLATES)),
):
    if identity.role == Role.ADMIN:
        templates = repos.templates.get_all()
    else:
        templates = repos.templates.get_by_clinic(identity.clinic_id or "")
    return sorted(templates, key=lambda t: t.name)


@router.get("/{template_id}", response_model=OrderTemplate)
def get_template(
    template_id: str,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_TEMPLATES)),
):
    return get_template_or_404(repos, identity, template_id)


@router.post("", response_model=OrderTemplate, status_code=201)
def create_template(
    payload: TemplateCreate,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_TEMPLATES)),
):
    record = to_record(payload)
    ensure_clinic_access(identity, record["clinicId"])
    record["createdBy"] = identity.id
    return repos.templates.create(record)


@router.put("/{template_id}", response_model=OrderTemplate)
def update_template(
    template_id: str,
    payload: TemplateUpdate,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_TEMPLATES)),
):
    get_template_or_404(repos, identity, template_id)
    return repos.templates.update(template_id, payload)


@router.post("/{template_id}/apply", response_model=List[CartItem])
def apply_template(
    template_id: str,
    payload: TemplateApply,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.PLACE_ORDERS)),
):
    """Expand a template into cart lines, merged into the cart sent along."""
    template = get_template_or_404(repos, identity, template_id)
    lines = template_to_cart(template, payload.quantities)
    if lines:
        repos.templates.update(template_id, {"lastUsed": utc_now(), "frequency": (template.frequency or 0) + 1})
    return merge_cart(payload.cart, lines)


@router.delete("/{template_id}", status_code=204)
def delete_template(
    template_id: str,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_TEMPLATES)),
):
    template = repos.templates.get_by_id(template_id)
    if template:
        ensure_clinic_access(identity, template.clinic_id)
        repos.templates.delete(template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
