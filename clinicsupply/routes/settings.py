"""Global and clinic-scoped settings."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..deps import get_repositories, require_permission
from ..errors import Forbidden, NotFound
from ..permissions import Permission, can_access_clinic, ensure_clinic_access, has_permission
from ..repositories import Repositories, to_record
from ..schemas import Identity, Settings, SettingsCreate, SettingsType, SettingsUpdate

router = APIRouter(prefix="/api/settings", tags=["settings"])


def _check_can_manage(identity: Identity, type: SettingsType, owner_id: Optional[str]):
    if type == SettingsType.GLOBAL:
        if not has_permission(identity.role, Permission.MANAGE_GLOBAL_SETTINGS):
            raise Forbidden("Insufficient permissions")
    else:
        ensure_clinic_access(identity, owner_id)


def _visible(identity: Identity, settings: Settings) -> bool:
    return settings.type == SettingsType.GLOBAL or can_access_clinic(identity, settings.owner_id)


def get_settings_or_404(repos: Repositories, identity: Identity, settings_id: str) -> Settings:
    settings = repos.settings.get_by_id(settings_id)
    if not settings:
        raise NotFound("settings not found")
    if settings.type == SettingsType.CLINIC:
        ensure_clinic_access(identity, settings.owner_id)
    return settings


@router.get("", response_model=List[Settings])
def list_settings(
    type: Optional[SettingsType] = Query(default=None),
    owner_id: Optional[str] = Query(default=None, alias="ownerId"),
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_SETTINGS)),
):
    if owner_id:
        ensure_clinic_access(identity, owner_id)
        found = repos.settings.get_by_owner(owner_id)
        if type:
            found = [s for s in found if s.type == type]
    elif type:
        found = repos.settings.get_by_type(type)
    else:
        found = repos.settings.get_all()
    return [s for s in found if _visible(identity, s)]


@router.get("/{settings_id}", response_model=Settings)
def get_settings(
    settings_id: str,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_SETTINGS)),
):
    return get_settings_or_404(repos, identity, settings_id)


@router.post("", response_model=Settings, status_code=201)
def create_settings(
    payload: SettingsCreate,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_CLINIC_SETTINGS)),
):
    record = to_record(payload)
    _check_can_manage(identity, payload.type, record.get("ownerId"))
    return repos.settings.create(record)


@router.put("/{settings_id}", response_model=Settings)
def update_settings(
    settings_id: str,
    payload: SettingsUpdate,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_CLINIC_SETTINGS)),
):
    existing = get_settings_or_404(repos, identity, settings_id)
    _check_can_manage(identity, existing.type, existing.owner_id)
    changes = to_record(payload, partial=True)
    if "type" in changes or "ownerId" in changes:
        _check_can_manage(
            identity,
            SettingsType(changes.get("type", existing.type.value)),
            changes.get("ownerId", existing.owner_id),
        )
    return repos.settings.update(settings_id, changes)


@router.delete("/{settings_id}", status_code=204)
def delete_settings(
    settings_id: str,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_CLINIC_SETTINGS)),
):
    existing = repos.settings.get_by_id(settings_id)
    if existing:
        _check_can_manage(identity, existing.type, existing.owner_id)
        repos.settings.delete(settings_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
