import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..auth import hash_password
from ..deps import Pagination, get_current_user, get_pagination, get_repositories, require_permission
from ..errors import Conflict, Forbidden, NotFound
from ..permissions import Permission, ensure_clinic_access, has_permission
from ..repositories import Repositories, to_record
from ..schemas import Identity, Page, Role, StatusToggle, User, UserCreate, UserUpdate
from ..utils import paginate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def _get_user(repos: Repositories, identity: Identity, user_id: str) -> User:
    user = repos.users.get_by_id(user_id)
    if not user:
        raise NotFound("user not found")
    ensure_clinic_access(identity, user.clinic_id)
    return user


def _visible_users(repos: Repositories, identity: Identity) -> List[User]:
    if identity.role == Role.ADMIN:
        return repos.users.get_all()
    return repos.users.get_by_clinic(identity.clinic_id or "")


@router.get("", response_model=Page[User])
def list_users(
    pagination: Pagination = Depends(get_pagination),
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_USERS)),
):
    users = sorted(_visible_users(repos, identity), key=lambda u: u.email)
    return Page[User](
        items=paginate(users, pagination.page, pagination.limit),
        total=len(users),
        page=pagination.page,
        limit=pagination.limit,
    )


@router.get("/me", response_model=User)
def read_me(repos: Repositories = Depends(get_repositories), identity: Identity = Depends(get_current_user)):
    user = repos.users.get_by_id(identity.id)
    if not user:
        # mock identity has no stored user behind it
        return User(id=identity.id, email=identity.email, name=identity.email, role=identity.role, clinic_id=identity.clinic_id)
    return user


@router.get("/{user_id}", response_model=User)
def get_user(
    user_id: str,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.VIEW_USERS)),
):
    return _get_user(repos, identity, user_id)


@router.post("", response_model=User, status_code=201)
def create_user(
    payload: UserCreate,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_USERS)),
):
    record = to_record(payload)
    if identity.role != Role.ADMIN:
        if record.get("clinicId") != identity.clinic_id:
            raise Forbidden("Cannot create user for different clinic")
        if payload.role == Role.ADMIN:
            raise Forbidden("Only administrators can create administrators")

    # check-then-create; the SQL backend's unique index backs this up
    if repos.users.get_by_email(record["email"]):
        raise Conflict("email already registered")

    password = record.pop("password", None)
    if password:
        record["passwordHash"] = hash_password(password)
    user = repos.users.create(record)
    logger.info("user %s created by %s", user.id, identity.id)
    return user


@router.put("/{user_id}", response_model=User)
def update_user(
    user_id: str,
    payload: UserUpdate,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_USERS)),
):
    existing = _get_user(repos, identity, user_id)
    changes = to_record(payload, partial=True)

    if "clinicId" in changes:
        ensure_clinic_access(identity, changes["clinicId"])
    if "role" in changes and changes["role"] != existing.role.value:
        if not has_permission(identity.role, Permission.CHANGE_ROLES):
            raise Forbidden("forbidden: admin required to change role")
    if "email" in changes and changes["email"] != existing.email:
        other = repos.users.get_by_email(changes["email"])
        if other and other.id != user_id:
            raise Conflict("email already registered")

    password = changes.pop("password", None)
    if password:
        changes["passwordHash"] = hash_password(password)
    return repos.users.update(user_id, changes)


@router.patch("/{user_id}/status", response_model=User)
def set_user_status(
    user_id: str,
    payload: StatusToggle,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.MANAGE_USERS)),
):
    _get_user(repos, identity, user_id)
    logger.info("user %s %s by %s", user_id, "enabled" if payload.is_active else "disabled", identity.id)
    return repos.users.update(user_id, {"isActive": payload.is_active})


@router.delete("/{user_id}", status_code=204)
def delete_user(
    user_id: str,
    repos: Repositories = Depends(get_repositories),
    identity: Identity = Depends(require_permission(Permission.DELETE_USERS)),
):
    repos.users.delete(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
