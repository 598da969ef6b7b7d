"""FastAPI dependencies: store, repositories, caller identity, role gate, pagination.

Identity comes from one of two modes (``AUTH_MODE``):

- ``token``: a bearer JWT whose ``email`` claim names an active user.
- ``mock``: a fixed administrator identity is attached to every request.
"""
import logging
from typing import Generator, Mapping, NamedTuple, Optional

import jwt
from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from . import config
from .auth import MOCK_IDENTITY, decode_access_token
from .db import SessionLocal
from .errors import Unauthorized
from .permissions import Permission, check_role, roles_with
from .repositories import Repositories
from .schemas import Identity, Role
from .storage import RecordStore, SqlStore

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def get_store(request: Request) -> Generator[RecordStore, None, None]:
    if config.get_settings().storage_backend == "sql":
        db = SessionLocal()
        try:
            yield SqlStore(db)
        finally:
            db.close()
    else:
        yield request.app.state.store


def get_repositories(store: RecordStore = Depends(get_store)) -> Repositories:
    return Repositories.from_store(store)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    repos: Repositories = Depends(get_repositories),
) -> Identity:
    if config.get_settings().auth_mode == "mock":
        return MOCK_IDENTITY

    if credentials is None:
        raise Unauthorized()

    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError as e:
        logger.warning("rejected bearer token: %s", e)
        raise Unauthorized("Invalid or expired token") from e

    user = repos.users.get_by_email(payload.get("email", ""))
    if not user or not user.is_active:
        logger.warning("token for unknown or inactive user %s", payload.get("sub"))
        raise Unauthorized("User not found or inactive")

    return Identity(id=user.id, email=user.email, role=user.role, clinic_id=user.clinic_id)


def require_roles(*roles: Role):
    """Dependency that only lets identities with one of ``roles`` through."""
    allowed = frozenset(roles)

    def dependency(identity: Identity = Depends(get_current_user)) -> Identity:
        check_role(identity, allowed)
        return identity

    return dependency


def require_permission(permission: Permission):
    return require_roles(*roles_with(permission))


class Pagination(NamedTuple):
    page: int
    limit: int


def _to_int(value) -> int:
    """Number-or-zero, so missing, blank and non-numeric values all fall back."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number or number in (float("inf"), float("-inf")):
        return 0
    return int(number)


def parse_pagination_params(params: Mapping[str, str], default_limit: int = DEFAULT_LIMIT) -> Pagination:
    page = max(1, _to_int(params.get("page")) or 1)
    limit = min(MAX_LIMIT, max(1, _to_int(params.get("limit")) or default_limit))
    return Pagination(page=page, limit=limit)


def get_pagination(
    page: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
) -> Pagination:
    return parse_pagination_params({"page": page, "limit": limit})
