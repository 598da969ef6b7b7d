"""Typed API errors and the JSON error envelope.

Every error the service reports to a caller is one of the classes below.
Handlers in ``clinicsupply.main`` turn them into::

    {"error": {"message": "...", "code": "NOT_FOUND", "statusCode": 404}}

Anything that is not an ``APIError`` is reported as ``InternalError`` with a
generic message; the original exception is only logged.
"""
from fastapi import status


class APIError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> dict:
        return format_error_response(self.message, self.code, self.status_code)


class BadRequest(APIError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"
    default_message = "Bad request"


class Unauthorized(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class Forbidden(APIError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFound(APIError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(APIError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_message = "Conflict"


class InternalError(APIError):
    pass


class ServiceUnavailable(APIError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "SERVICE_UNAVAILABLE"
    default_message = "Service unavailable"


# Framework-raised HTTP statuses mapped onto the codes above
STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "BAD_REQUEST",
    409: "CONFLICT",
    503: "SERVICE_UNAVAILABLE",
}


def code_for_status(status_code: int) -> str:
    return STATUS_CODES.get(status_code, "INTERNAL_SERVER_ERROR")


def format_error_response(message: str, code: str, status_code: int) -> dict:
    return {"error": {"message": message, "code": code, "statusCode": status_code}}
