"""Mapping from service failures to HTTP responses.

This is the only place an ``ErrorKind`` becomes a status code.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.core.errors import ErrorKind, ServiceError, field_errors_from_details, invalid_input


logger = logging.getLogger(__name__)


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UPSTREAM: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ServiceErrorException(Exception):
    """Carries a ServiceError out of a FastAPI dependency."""

    def __init__(self, error: ServiceError) -> None:
        super().__init__(error.message)
        self.error = error


def error_body(error: ServiceError) -> dict:
    body = {"success": False, "code": error.code, "message": error.message}
    if error.errors:
        body["errors"] = [field_error.model_dump() for field_error in error.errors]
    return body


def error_response(error: ServiceError) -> JSONResponse:
    """Render a ServiceError with its mapped status code."""
    status_code = STATUS_BY_KIND[error.kind]
    if error.kind == ErrorKind.UPSTREAM:
        logger.error("request_failed_upstream", extra={"code": error.code})
    return JSONResponse(content=error_body(error), status_code=status_code)


def success_response(content: dict, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(content={"success": True, **content}, status_code=status_code)


async def service_error_handler(_request: Request, exc: ServiceErrorException) -> JSONResponse:
    return error_response(exc.error)


async def request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed query/path/body input as a 400 in the common error shape."""
    errors = field_errors_from_details(list(exc.errors()))
    message = errors[0].message if errors else "Invalid input"
    return error_response(invalid_input(message, errors))


def install_error_handlers(app: FastAPI) -> None:
    """Register the handlers that render failures in the common error shape."""
    app.add_exception_handler(ServiceErrorException, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
