"""Application errors and the JSON error envelope."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base error carrying an HTTP status and a client-facing message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, error: Any = None):
        self.message = message or self.message
        self.error = error
        super().__init__(self.message)


class ContentStoreError(AppError):
    """The document content store failed."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "Content store unavailable"


class ContentStoreTimeoutError(ContentStoreError):
    """A content store operation exceeded its time budget."""

    message = "Content store operation timed out"


class AIServiceError(AppError):
    """The generative AI service could not produce an answer."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "AI service error"


def error_envelope(
    status_code: int,
    message: str,
    error: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the uniform ``{success: false, message, error?}`` response."""
    content: dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        content["error"] = jsonable_encoder(error)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    error = None
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"Route {request.method} {request.url.path} not found"
    elif isinstance(exc.detail, dict):
        # detail={"message": ..., "error": ...}
        message = str(exc.detail.get("message", ""))
        error = exc.detail.get("error")
    else:
        message = str(exc.detail)
    return error_envelope(
        exc.status_code,
        message,
        error=error,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return error_envelope(
        status.HTTP_400_BAD_REQUEST,
        "Invalid request",
        error=exc.errors(),
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(
        "%s on %s %s: %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc.message,
    )
    return error_envelope(exc.status_code, exc.message, error=exc.error)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return the envelope for any uncaught exception."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return error_envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        error=str(exc) if settings.DEBUG else None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the envelope handlers to the application."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
