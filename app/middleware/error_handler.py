"""Map exceptions to JSON error bodies."""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppException, UnauthorizedException

logger = structlog.get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


def error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    headers: dict[str, str] | None = None,
    **extra,
) -> JSONResponse:
    """Build the error body shared by every handler."""
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, "path": request.url.path, **extra},
        headers=headers,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Render application exceptions with their own status code.

    401 responses carry a bearer challenge. Messages of 5xx errors are
    replaced so internals never reach the client.
    """
    if exc.status_code >= 500:
        logger.error("app_exception", error=type(exc).__name__, exc_info=exc)
        return error_response(request, exc.status_code, type(exc).__name__, INTERNAL_ERROR_MESSAGE)

    logger.info("app_exception", error=type(exc).__name__, status_code=exc.status_code)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedException) else None
    return error_response(request, exc.status_code, type(exc).__name__, exc.message, headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors such as 404 and 405."""
    return error_response(
        request, exc.status_code, "HTTPException", str(exc.detail), getattr(exc, "headers", None)
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Report malformed request bodies as 400.

    Only the location, message and type of each error are returned; submitted
    values are dropped so passwords never echo back.
    """
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    return error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "ValidationError",
        "Request validation failed",
        details=details,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and answer with a generic 500."""
    logger.error("unhandled_exception", error=type(exc).__name__, exc_info=exc)
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "InternalServerError",
        INTERNAL_ERROR_MESSAGE,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install every handler on the application."""
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, general_exception_handler)
