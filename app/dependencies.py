"""FastAPI dependencies."""

from collections.abc import Awaitable, Callable
from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import InvalidTokenException
from app.core.security import Clock, PasswordHasher, TokenService, utcnow
from app.database import get_db
from app.schemas.admin import Capability
from app.services.admin_service import AdminService
from app.services.admin_store import AdminStore
from app.services.authorization import ensure_permission
from app.services.lockout import LockoutPolicy

# Security; missing credentials are reported as 401 by get_current_admin
security = HTTPBearer(auto_error=False)


def get_clock() -> Clock:
    """Clock used for lockout windows, token expiry and timestamps."""
    return utcnow


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Password hasher configured with the bcrypt cost factor."""
    return PasswordHasher(rounds=settings.bcrypt_rounds)


def get_token_service(clock: Annotated[Clock, Depends(get_clock)]) -> TokenService:
    """Token service configured with the signing secret."""
    return TokenService(
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expire_hours=settings.jwt_expire_hours,
        clock=clock,
    )


def get_admin_store(
    db: Annotated[AsyncSession, Depends(get_db)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> AdminStore:
    """Admin credential store bound to the request's session."""
    return AdminStore(db, hasher, clock)


def get_admin_service(
    store: Annotated[AdminStore, Depends(get_admin_store)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> AdminService:
    """Admin service wired with lockout policy and token service."""
    lockout = LockoutPolicy(
        store,
        max_attempts=settings.max_login_attempts,
        lock_duration=timedelta(minutes=settings.lock_duration_minutes),
        clock=clock,
    )
    return AdminService(store, lockout, tokens)


async def get_current_admin(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    service: Annotated[AdminService, Depends(get_admin_service)],
) -> dict:
    """
    Resolve the authenticated admin from the bearer token.

    Args:
        credentials: Bearer token credentials
        service: Admin service

    Returns:
        Admin data freshly loaded from the database

    Raises:
        InvalidTokenException: If no token is provided or it is invalid
        AccountInactiveException: If the admin is not active
    """
    if credentials is None or not credentials.credentials:
        raise InvalidTokenException("Access denied. No token provided.")

    return await service.verify_request(credentials.credentials)


def require_permission(capability: Capability) -> Callable[..., Awaitable[dict]]:
    """
    Build a dependency that requires a capability.

    Args:
        capability: Capability the admin must hold

    Returns:
        Dependency returning the authenticated admin
    """

    async def dependency(admin: Annotated[dict, Depends(get_current_admin)]) -> dict:
        ensure_permission(admin, capability)
        return admin

    return dependency


# Type aliases for dependency injection
AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]
CurrentAdmin = Annotated[dict, Depends(get_current_admin)]
