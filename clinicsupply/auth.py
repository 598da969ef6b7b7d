import time
from typing import Optional

import jwt
from passlib.context import CryptContext

from .config import get_settings
from .schemas import Identity, Role

# Use pbkdf2_sha256 as default to avoid bcrypt 72-byte limitation in some envs
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

ALGORITHM = "HS256"

# Attached unconditionally when AUTH_MODE=mock; not a security feature.
MOCK_IDENTITY = Identity(id="1", email="test@example.com", role=Role.ADMIN, clinic_id="1")


def create_access_token(user_id: str, email: str, role: str, expires_delta: Optional[int] = None) -> str:
    settings = get_settings()
    now = int(time.time())
    exp = now + (expires_delta or settings.token_expire_seconds)
    payload = {"sub": str(user_id), "email": email, "role": role, "iat": now, "exp": exp}
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Raises ``jwt.PyJWTError`` for bad signatures, expiry or garbage."""
    return jwt.decode(token, get_settings().jwt_secret, algorithms=[ALGORITHM])


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)
