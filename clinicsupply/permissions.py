"""Role -> capability table and clinic-scope checks."""
import logging
from enum import Enum
from typing import FrozenSet, Optional

from .errors import Forbidden
from .schemas import Identity, Role

logger = logging.getLogger(__name__)


class Permission(str, Enum):
    VIEW_USERS = "users:view"
    MANAGE_USERS = "users:manage"
    DELETE_USERS = "users:delete"
    CHANGE_ROLES = "users:change-role"
    VIEW_CLINICS = "clinics:view"
    MANAGE_CLINICS = "clinics:manage"
    VIEW_PRODUCTS = "products:view"
    MANAGE_PRODUCTS = "products:manage"
    VIEW_INVENTORY = "inventory:view"
    VIEW_GLOBAL_INVENTORY = "inventory:view-global"
    MANAGE_INVENTORY = "inventory:manage"
    VIEW_ORDERS = "orders:view"
    PLACE_ORDERS = "orders:place"
    APPROVE_ORDERS = "orders:approve"
    DELETE_ORDERS = "orders:delete"
    VIEW_TEMPLATES = "templates:view"
    MANAGE_TEMPLATES = "templates:manage"
    VIEW_SETTINGS = "settings:view"
    MANAGE_CLINIC_SETTINGS = "settings:manage-clinic"
    MANAGE_GLOBAL_SETTINGS = "settings:manage-global"


_STAFF = frozenset({
    Permission.VIEW_USERS,
    Permission.VIEW_CLINICS,
    Permission.VIEW_PRODUCTS,
    Permission.VIEW_INVENTORY,
    Permission.VIEW_ORDERS,
    Permission.PLACE_ORDERS,
    Permission.VIEW_TEMPLATES,
    Permission.VIEW_SETTINGS,
})

_MANAGER = _STAFF | {
    Permission.MANAGE_USERS,
    Permission.APPROVE_ORDERS,
    Permission.MANAGE_TEMPLATES,
    Permission.MANAGE_CLINIC_SETTINGS,
}

CAPABILITIES: dict[Role, FrozenSet[Permission]] = {
    Role.ADMIN: frozenset(Permission),
    Role.MANAGER: frozenset(_MANAGER),
    Role.STAFF: _STAFF,
}

_missing = set(Role) - set(CAPABILITIES)
if _missing:
    raise RuntimeError(f"capability table has no entry for roles: {sorted(r.value for r in _missing)}")


def has_permission(role: Role, permission: Permission) -> bool:
    return permission in CAPABILITIES[role]


def roles_with(permission: Permission) -> FrozenSet[Role]:
    return frozenset(role for role, perms in CAPABILITIES.items() if permission in perms)


def check_role(identity: Identity, roles) -> None:
    if identity.role not in roles:
        logger.warning("user %s with role %s denied (allowed: %s)",
                       identity.id, identity.role.value, ",".join(sorted(r.value for r in roles)))
        raise Forbidden("Insufficient permissions")


def can_access_clinic(identity: Identity, clinic_id: Optional[str]) -> bool:
    return identity.role == Role.ADMIN or (identity.clinic_id is not None and identity.clinic_id == clinic_id)


def ensure_clinic_access(identity: Identity, clinic_id: Optional[str]) -> None:
    if not can_access_clinic(identity, clinic_id):
        logger.warning("user %s denied access to clinic %s", identity.id, clinic_id)
        raise Forbidden("Access denied to this clinic")
