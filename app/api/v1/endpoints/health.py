"""Liveness and dependency health endpoints."""

from typing import Literal

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from app.config import settings
from app.database import check_database_connection

router = APIRouter(prefix="/health", tags=["Health"])

HealthState = Literal["healthy", "degraded"]


class ServiceHealth(BaseModel):
    """Service identity and overall state."""

    status: HealthState
    service: str
    version: str
    environment: str


class DependencyHealth(ServiceHealth):
    """Service health plus the credential store."""

    database: Literal["healthy", "unhealthy"]


def _service_health(state: HealthState) -> dict:
    return {
        "status": state,
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }


@router.get("", response_model=ServiceHealth, summary="Liveness probe")
async def health_check() -> ServiceHealth:
    """Report that the process is up without touching the database."""
    return ServiceHealth(**_service_health("healthy"))


@router.get("/detailed", response_model=DependencyHealth, summary="Dependency health")
async def detailed_health_check(response: Response) -> DependencyHealth:
    """
    Ping the credential store.

    Responds 503 when the database is unreachable, since no admin can log in.
    """
    database_ok = await check_database_connection()
    if not database_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return DependencyHealth(
        **_service_health("healthy" if database_ok else "degraded"),
        database="healthy" if database_ok else "unhealthy",
    )
