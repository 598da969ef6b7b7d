from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..deps import get_repositories, require_permission
from ..errors import NotFound
from ..permissions import Permission, ensure_clinic_access
from ..repositories import Repositories
from ..schemas import Clinic, ClinicCreate, ClinicUpdate, Identity, Role, StatusToggle, User

router = APIRouter(prefix="/api/clinics", tags=["clinics"])


def get_clinic_or_404(repos: Repositories, identity: Identity, clinic_id: str) -> Clinic:
    clinic = repos.clinics.get_by_id(clinic_id)
    if not clinic:
        raise NotFound("clinic not found")
    ensure_clinic_access(identity, clinic.id)
    return clinic


@router.get("", response_model=List[Clinic])
def list_clinics(
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_CLINICS)),
):
    if identity.role == Role.ADMIN:
        return sorted(repos.clinics.get_all(), key=lambda c: c.name)
    clinic = repos.clinics.get_by_id(identity.clinic_id or "")
    return [clinic] if clinic else []


@router.get("/{clinic_id}", response_model=Clinic)
def get_clinic(
    clinic_id: str,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_CLINICS)),
):
    return get_clinic_or_404(repos, identity, clinic_id)


@router.get("/{clinic_id}/users", response_model=List[User])
def list_clinic_users(
    clinic_id: str,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_USERS)),
):
    get_clinic_or_404(repos, identity, clinic_id)
    return repos.users.get_by_clinic(clinic_id)


@router.post("", response_model=Clinic, status_code=201)
def create_clinic(
    payload: ClinicCreate,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_CLINICS)),
):
    return repos.clinics.create(payload)


@router.put("/{clinic_id}", response_model=Clinic)
def update_clinic(
    clinic_id: str,
    payload: ClinicUpdate,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_CLINICS)),
):
    return repos.clinics.update(clinic_id, payload)


@router.patch("/{clinic_id}/status", response_model=Clinic)
def set_clinic_status(
    clinic_id: str,
    payload: StatusToggle,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_CLINICS)),
):
    return repos.clinics.update(clinic_id, {"isActive": payload.is_active})


@router.delete("/{clinic_id}", status_code=204)
def delete_clinic(
    clinic_id: str,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_CLINICS)),
):
    # users, orders and templates of the clinic are left in place
    repos.clinics.delete(clinic_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
