"""Runtime configuration for the app (toggleable during tests/runtime)."""
import logging
import os
from typing import NamedTuple

STORAGE_BACKENDS = ("memory", "sql")
AUTH_MODES = ("token", "mock")


class Settings(NamedTuple):
    storage_backend: str
    database_url: str
    auth_mode: str
    jwt_secret: str
    token_expire_seconds: int
    log_level: str


def load_settings() -> Settings:
    return Settings(
        storage_backend=os.getenv("STORAGE_BACKEND", "memory").lower(),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./clinicsupply.db"),
        auth_mode=os.getenv("AUTH_MODE", "token").lower(),
        jwt_secret=os.getenv("JWT_SECRET", "dev-secret"),
        token_expire_seconds=int(os.getenv("TOKEN_EXPIRE_SECONDS", str(60 * 60 * 24))),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


state = load_settings()


def get_settings() -> Settings:
    return state


def configure(**overrides) -> Settings:
    """Replace selected settings, e.g. ``configure(auth_mode="mock")``."""
    global state
    if overrides.get("storage_backend", STORAGE_BACKENDS[0]) not in STORAGE_BACKENDS:
        raise ValueError(f"unknown storage backend: {overrides['storage_backend']}")
    if overrides.get("auth_mode", AUTH_MODES[0]) not in AUTH_MODES:
        raise ValueError(f"unknown auth mode: {overrides['auth_mode']}")
    state = state._replace(**overrides)
    return state


def configure_logging(level: str | None = None):
    logging.basicConfig(
        level=level or state.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
