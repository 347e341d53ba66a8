"""Error types and FastAPI exception handlers for the Uploads API."""

import logging

import pydantic
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

INTERNAL_SERVER_ERROR_MESSAGE = "Internal server error"


class StorageError(Exception):
    """Base class for failures raised by a storage backend."""


class LocalStorageError(StorageError):
    """Writing to or reading from the uploads directory failed."""


class RemoteStorageError(StorageError):
    """The remote media host rejected the call or could not be reached."""


def log_error(context: str, exc: BaseException, include_traceback: bool = False) -> None:
    """Log a server-side failure; the traceback is only attached in development."""
    logger.error(
        "[%s] %s: %s",
        context,
        type(exc).__name__,
        exc,
        exc_info=exc if include_traceback else None,
    )


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def handle_request_validation_errors(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed form data (e.g. ``image`` sent as text) is a client error."""
    logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return error_response("Invalid upload request", status.HTTP_400_BAD_REQUEST)


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    """A response model failed to validate; that is a server bug, not a client error."""
    settings = getattr(request.app.state, "settings", None)
    log_error(
        f"{request.method} {request.url.path}",
        exc,
        include_traceback=bool(settings and settings.is_development),
    )
    return error_response(INTERNAL_SERVER_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception as exc:  # pylint: disable=broad-except
        settings = getattr(request.app.state, "settings", None)
        log_error(
            f"{request.method} {request.url.path}",
            exc,
            include_traceback=bool(settings and settings.is_development),
        )
        return error_response(INTERNAL_SERVER_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)
