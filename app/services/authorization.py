"""Capability checks for admin accounts."""

import structlog

from app.core.exceptions import ForbiddenException
from app.schemas.admin import AdminRole, Capability

logger = structlog.get_logger(__name__)


def has_permission(admin: dict, capability: Capability) -> bool:
    """
    Check whether an admin holds a capability.

    Super admins hold every capability regardless of their permissions map.
    Otherwise the flag must be exactly ``True``; missing flags deny.

    Args:
        admin: Admin account dict
        capability: Capability to check

    Returns:
        True if the capability is granted
    """
    if AdminRole(admin["role"]) is AdminRole.SUPER_ADMIN:
        return True

    permissions = admin.get("permissions") or {}
    return permissions.get(capability.value) is True


def is_super_admin(admin: dict) -> bool:
    """Check whether the admin has the super_admin role."""
    return AdminRole(admin["role"]) is AdminRole.SUPER_ADMIN


def can_manage_admins(admin: dict) -> bool:
    """Check the guard used for admin registration, listing and editing."""
    return has_permission(admin, Capability.MANAGE_ADMINS) or is_super_admin(admin)


def ensure_permission(admin: dict, capability: Capability, message: str | None = None) -> None:
    """Raise ForbiddenException unless the admin holds the capability."""
    if has_permission(admin, capability):
        return

    logger.warning(
        "permission_denied",
        admin_id=str(admin["id"]),
        username=admin.get("username"),
        capability=capability.value,
    )
    raise ForbiddenException(message or "Access denied. You do not have permission.")


def ensure_can_assign_role(admin: dict, role: AdminRole) -> None:
    """Only super admins may grant the super_admin role."""
    if role is AdminRole.SUPER_ADMIN and not is_super_admin(admin):
        logger.warning(
            "super_admin_elevation_denied",
            admin_id=str(admin["id"]),
            username=admin.get("username"),
        )
        raise ForbiddenException(
            "Only super administrators can create other super administrators."
        )
