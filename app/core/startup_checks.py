"""Configuration checks run before the application serves requests."""

import structlog

from app.config import Settings

logger = structlog.get_logger(__name__)


def validate_security_settings(settings: Settings) -> None:
    """
    Refuse insecure signing configuration in production.

    Outside production the placeholder secret is allowed but logged, so
    local setups keep working while the misconfiguration stays visible.

    Raises:
        RuntimeError: If the JWT secret is the placeholder in production
    """
    if not settings.uses_insecure_jwt_secret:
        return

    if settings.is_production:
        logger.critical("insecure_jwt_secret", environment=settings.environment)
        raise RuntimeError("JWT_SECRET_KEY must be set in production")

    logger.warning(
        "insecure_jwt_secret",
        environment=settings.environment,
        note="Set JWT_SECRET_KEY; tokens signed with the placeholder are forgeable.",
    )
