"""Payload validation that reports failures as ``BadRequest``."""
from typing import Any, Iterable, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import BadRequest

ModelT = TypeVar("ModelT", bound=BaseModel)

# request-location prefixes FastAPI puts in front of field paths
_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def format_errors(errors: Iterable[dict]) -> str:
    messages = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in _LOCATIONS]
        field = ".".join(loc)
        msg = err.get("msg", "invalid value")
        messages.append(f"{field}: {msg}" if field else msg)
    return ", ".join(messages)


def is_malformed_json(errors: Iterable[dict]) -> bool:
    return any(err.get("type") == "json_invalid" for err in errors)


def validate_payload(schema: Type[ModelT], data: Any) -> ModelT:
    """Validate ``data`` against ``schema``; every field message is collected."""
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise BadRequest(format_errors(e.errors())) from e
