"""Application exception classes and handlers."""

from datetime import UTC, datetime

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger()


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


# --- Bad Request (400) ---


class ValidationError(AppException):
    """Missing or malformed input."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="ValidationError", status_code=400)


# --- Authentication (401) ---


class UnauthorizedError(AppException):
    """Caller is not authenticated."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message=message, code="UnauthorizedError", status_code=401)


# --- Authorization (403) ---


class ForbiddenError(AppException):
    """Caller may not access the resource."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message=message, code="Forbidden", status_code=403)


# --- Not Found (404) ---


class NotFoundError(AppException):
    """Requested resource does not exist."""

    def __init__(self, resource: str) -> None:
        super().__init__(
            message=f"{resource} not found",
            code="NotFoundError",
            status_code=404,
        )


# --- Conflict (409) ---


class ConflictError(AppException):
    """Request conflicts with existing state."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="Conflict", status_code=409)


# --- Upstream (500) ---


class AIProviderError(AppException):
    """The AI provider failed to produce a reply.

    ``message`` is safe to show to end users; ``detail`` keeps the
    provider-side reason for logs.
    """

    def __init__(self, message: str, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(message=message, code="AIProviderError", status_code=500)


# --- Exception Handlers ---


def error_body(code: str, message: str) -> dict:
    """Build the error envelope shared by HTTP and WebSocket responses."""
    return {
        "success": False,
        "error": code,
        "message": message,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Central exception handler for AppException."""
    if exc.status_code >= 500:
        logger.error(
            "Request failed",
            path=request.url.path,
            method=request.method,
            code=exc.code,
            error=exc.message,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures as 400 ValidationError."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    return JSONResponse(
        status_code=400,
        content=error_body("ValidationError", message),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for unexpected failures."""
    logger.exception(
        "Unhandled error",
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=500,
        content=error_body("AppError", "Internal Server Error"),
    )
