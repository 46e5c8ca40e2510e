"""Error taxonomy and the exception handlers that render it.

Each error class pins an HTTP status and a stable ``error_code``; the
handlers below render every error in one envelope:

    {"error": {"code": "...", "message": "...", "details": {...}}}

Store-level failures that escape the services (connection drops during
commit, for instance) are rendered as STORE_UNAVAILABLE, the only code a
client should retry.
"""

import logging
from typing import Union

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

Details = Union[dict, list, None]


class SnipVaultException(Exception):
    """Base exception for SnipVault application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Details = None):
        self.message = message
        self.details = details
        super().__init__(message)


class UnauthenticatedError(SnipVaultException):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHENTICATED"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class InvalidRequestError(SnipVaultException):
    """Missing or malformed kind, id, or batch payload."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "INVALID_REQUEST"


class PreconditionFailedError(SnipVaultException):
    """The entity is not in the state the transition starts from."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "PRECONDITION_FAILED"


class ResourceNotFoundError(SnipVaultException):
    """Absent, or owned by someone else; the two are indistinguishable."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}")


class StoreUnavailableError(SnipVaultException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "STORE_UNAVAILABLE"

    def __init__(
        self,
        message: str = "Store temporarily unavailable. Please try again.",
        details: Details = None,
    ):
        super().__init__(message, details)


class RecycleBinFetchError(StoreUnavailableError):
    """One or more kinds could not be listed; names them for a scoped retry."""

    def __init__(self, failed_kinds: list[str]):
        self.failed_kinds = failed_kinds
        super().__init__(
            f"Failed to fetch deleted {', '.join(failed_kinds)}",
            details={"failed_kinds": failed_kinds},
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str,
    details: Details = None,
    headers: dict | None = None,
) -> JSONResponse:
    body: dict = {"code": error_code, "message": message}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content={"error": body}, headers=headers)


def _where(request: Request) -> dict:
    return {"path": request.url.path, "method": request.method}


async def snipvault_exception_handler(request: Request, exc: SnipVaultException) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.message,
        extra={**_where(request), "error_code": exc.error_code},
    )

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    return create_error_response(
        exc.status_code, exc.message, exc.error_code, exc.details, headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes, wrong methods and other framework-raised errors."""
    if exc.status_code >= 500:
        logger.error("HTTP %s: %s", exc.status_code, exc.detail, extra=_where(request))
    return create_error_response(
        exc.status_code, str(exc.detail), f"HTTP_{exc.status_code}",
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning("Validation error on %s", request.url.path, extra=_where(request))
    return create_error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation error", "VALIDATION_ERROR",
        details={"errors": errors},
    )


async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Integrity error on %s: %s", request.url.path, exc.orig, extra=_where(request))
    return create_error_response(
        status.HTTP_409_CONFLICT, "Database constraint violation", "INTEGRITY_ERROR",
    )


async def store_exception_handler(
    request: Request, exc: Union[OperationalError, InterfaceError],
) -> JSONResponse:
    logger.error("Store unavailable on %s: %s", request.url.path, exc.orig, extra=_where(request))
    unavailable = StoreUnavailableError()
    return create_error_response(
        unavailable.status_code, unavailable.message, unavailable.error_code,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception on %s: %s", request.url.path, exc,
        extra=_where(request), exc_info=exc,
    )
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
        "INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app):
    app.add_exception_handler(SnipVaultException, snipvault_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_exception_handler)
    app.add_exception_handler(OperationalError, store_exception_handler)
    app.add_exception_handler(InterfaceError, store_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
