"""Admin API application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from app.api.v1.router import api_router
from app.config import Settings, settings
from app.core.startup_checks import validate_security_settings
from app.database import check_database_connection, engine
from app.middleware.error_handler import register_exception_handlers
from app.middleware.logging import LoggingMiddleware, configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Refuse unsafe configuration, probe the database, release pools on exit."""
    config: Settings = app.state.settings
    logger.info("admin_api_starting", environment=config.environment)

    validate_security_settings(config)

    if await check_database_connection():
        logger.info("credential_store_reachable")
    else:
        logger.error("credential_store_unreachable")

    yield

    await engine.dispose()
    logger.info("admin_api_stopped")


def setup_metrics(app: FastAPI) -> None:
    """Expose request metrics for Prometheus at /metrics."""
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics", "/docs", "/redoc", "/openapi.json"],
        inprogress_name="admin_api_requests_inprogress",
        inprogress_labels=True,
    )
    instrumentator.instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)


def create_app(config: Settings = settings) -> FastAPI:
    """
    Build the admin API.

    Interactive docs are only served outside production.

    Args:
        config: Application settings

    Returns:
        Configured FastAPI application
    """
    configure_logging(config)

    docs_enabled = not config.is_production
    application = FastAPI(
        title=config.app_name,
        version=config.app_version,
        description="Admin authentication and authorization API for the college event site",
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    application.state.settings = config

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "PATCH"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )
    application.add_middleware(LoggingMiddleware)

    register_exception_handlers(application)
    application.include_router(api_router, prefix=config.api_v1_prefix)
    setup_metrics(application)

    @application.get("/", tags=["Root"], include_in_schema=False)
    async def service_info() -> dict[str, str]:
        """Name, version and API prefix of this service."""
        return {
            "service": config.app_name,
            "version": config.app_version,
            "api": config.api_v1_prefix,
        }

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
