import logging

from fastapi import APIRouter, Depends

from ..auth import create_access_token, verify_password
from ..deps import get_repositories
from ..errors import Unauthorized
from ..repositories import Repositories
from ..schemas import LoginRequest, Token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/token", response_model=Token)
def issue_token(payload: LoginRequest, repos: Repositories = Depends(get_repositories)):
    user = repos.users.get_by_email(payload.email)
    hashed = repos.users.get_password_hash(user.id) if user else None
    # one message for unknown users, wrong passwords and disabled accounts
    if not user or not hashed or not verify_password(payload.password, hashed) or not user.is_active:
        logger.warning("failed login for %s", payload.email)
        raise Unauthorized("invalid credentials")
    logger.info("issued token for user %s", user.id)
    return Token(access_token=create_access_token(user.id, user.email, user.role.value))
