"""Typed failures returned by the service layer.

Services never raise for expected failures. They return a ``ServiceError`` value
and the HTTP boundary maps its ``kind`` to a status code in one place.
"""

from enum import StrEnum

from pydantic import BaseModel, Field, ValidationError


class ErrorKind(StrEnum):
    """Categories of failures a service operation can produce."""

    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    CONFLICT = "conflict"
    UPSTREAM = "upstream"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Authentication errors
    ERR_NOT_AUTHORIZED = "ERR_NOT_AUTHORIZED"
    ERR_INVALID_CREDENTIALS = "ERR_INVALID_CREDENTIALS"
    ERR_INCORRECT_PASSWORD = "ERR_INCORRECT_PASSWORD"

    # Resource errors
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"

    # Input errors
    ERR_VALIDATION = "ERR_VALIDATION"
    ERR_EMAIL_TAKEN = "ERR_EMAIL_TAKEN"

    # Infrastructure errors
    ERR_UPSTREAM = "ERR_UPSTREAM"


class FieldError(BaseModel):
    """A single invalid field in a request payload."""

    field: str
    message: str


class ServiceError(BaseModel):
    """Structured failure produced by a service operation."""

    kind: ErrorKind
    code: str
    message: str
    errors: list[FieldError] = Field(default_factory=list)


NOT_AUTHORIZED_MESSAGE = "Not authorized to access this route"
TASK_NOT_FOUND_MESSAGE = "Task not found"


def unauthenticated(
    message: str = NOT_AUTHORIZED_MESSAGE, code: str = ErrorCode.ERR_NOT_AUTHORIZED
) -> ServiceError:
    """Build an UNAUTHENTICATED failure."""
    return ServiceError(kind=ErrorKind.UNAUTHENTICATED, code=code, message=message)


def task_not_found() -> ServiceError:
    """Build the NOT_FOUND failure shared by absent and foreign tasks."""
    return ServiceError(kind=ErrorKind.NOT_FOUND, code=ErrorCode.ERR_TASK_NOT_FOUND, message=TASK_NOT_FOUND_MESSAGE)


def invalid_input(message: str, errors: list[FieldError] | None = None) -> ServiceError:
    """Build an INVALID_INPUT failure."""
    return ServiceError(
        kind=ErrorKind.INVALID_INPUT,
        code=ErrorCode.ERR_VALIDATION,
        message=message,
        errors=errors or [],
    )


def conflict(message: str) -> ServiceError:
    """Build a CONFLICT failure."""
    return ServiceError(kind=ErrorKind.CONFLICT, code=ErrorCode.ERR_EMAIL_TAKEN, message=message)


def upstream(message: str = "Storage service unavailable") -> ServiceError:
    """Build an UPSTREAM failure."""
    return ServiceError(kind=ErrorKind.UPSTREAM, code=ErrorCode.ERR_UPSTREAM, message=message)


def _field_path(loc: tuple[int | str, ...]) -> str:
    """Render a pydantic error location, dropping request-section prefixes."""
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or "request"


def field_errors_from_details(details: list[dict]) -> list[FieldError]:
    """Convert pydantic/FastAPI error details into field errors."""
    errors = []
    for detail in details:
        message = str(detail.get("msg", "Invalid value"))
        # pydantic prefixes custom validator messages
        message = message.removeprefix("Value error, ")
        errors.append(FieldError(field=_field_path(tuple(detail.get("loc", ()))), message=message))
    return errors


def invalid_input_from_validation(exc: ValidationError) -> ServiceError:
    """Convert a pydantic ValidationError into an INVALID_INPUT failure.

    The first field message becomes the top-level message so that clients that
    only read ``message`` still get something actionable.
    """
    errors = field_errors_from_details(exc.errors())
    message = errors[0].message if errors else "Invalid input"
    return invalid_input(message, errors)
