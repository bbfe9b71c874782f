"""API error taxonomy. Route code raises these; app.main renders them as the response envelope."""

from typing import Any

from app.core.messages import ERROR_MESSAGES


class ApiError(Exception):
    """
    Base class for errors that become an error envelope.

    code: stable machine-readable identifier (e.g. USER_NOT_FOUND).
    details: extra fields merged into the envelope's ``error`` object.
    """

    status_code = 500
    default_code = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.code = code or self.default_code
        self.message = message or ERROR_MESSAGES.get(self.code, self.code)
        self.details = details or {}
        self.headers = headers
        super().__init__(self.message)

    def payload(self) -> dict[str, Any]:
        return {"code": self.code, **self.details}


class BadRequest(ApiError):
    status_code = 400
    default_code = "BAD_REQUEST"


class ValidationFailed(BadRequest):
    """400 carrying every field error: {errors, totalErrors, details}."""

    default_code = "VALIDATION_FAILED"

    def __init__(self, errors: list[dict[str, Any]], message: str | None = None) -> None:
        self.errors = errors
        super().__init__(
            message=message,
            details={
                "errors": errors,
                "totalErrors": len(errors),
                "details": "Please check the field errors below",
            },
        )


class Unauthenticated(ApiError):
    status_code = 401
    default_code = "AUTHENTICATION_FAILED"

    def __init__(self, code: str | None = None, message: str | None = None) -> None:
        super().__init__(code, message, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(ApiError):
    status_code = 403
    default_code = "INSUFFICIENT_PERMISSIONS"


class NotFound(ApiError):
    status_code = 404
    default_code = "NOT_FOUND"


class Conflict(ApiError):
    status_code = 409
    default_code = "CONFLICT"


class TooManyRequests(ApiError):
    status_code = 429
    default_code = "TOO_MANY_REQUESTS"


class InternalError(ApiError):
    status_code = 500
    default_code = "INTERNAL_SERVER_ERROR"


class ServiceUnavailable(ApiError):
    status_code = 503
    default_code = "SERVICE_UNAVAILABLE"
