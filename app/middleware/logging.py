"""Structured logging setup and per-request log context."""

import logging
import sys
from collections.abc import Callable
from time import perf_counter
from uuid import uuid4

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import Settings

REQUEST_ID_HEADER = "X-Request-ID"


def configure_logging(config: Settings) -> None:
    """
    Route structlog through the stdlib root logger.

    ``LOG_FORMAT=json`` renders one JSON object per line; anything else uses
    the colored console renderer.

    Args:
        config: Application settings carrying log level and format
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if config.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.getLevelName(config.log_level.upper()),
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """Bind a request id to every log line emitted while serving a request.

    Request bodies and the Authorization header are never logged.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        logger = structlog.get_logger()
        started = perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request_crashed", elapsed_ms=_elapsed_ms(started))
            raise

        logger.info(
            "request_handled",
            status_code=response.status_code,
            elapsed_ms=_elapsed_ms(started),
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _elapsed_ms(started: float) -> float:
    return round((perf_counter() - started) * 1000, 2)
