"""Admin authentication and account management endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from app.dependencies import AdminServiceDep, CurrentAdmin
from app.schemas.admin import (
    AdminEnvelope,
    AdminListResponse,
    AdminProfileUpdate,
    AdminRegisterRequest,
    AdminUpdate,
)
from app.schemas.auth import ChangePasswordRequest, LoginRequest, LoginResponse, MessageResponse
from app.services.admin_service import to_public

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Admin login",
)
async def login(request: LoginRequest, service: AdminServiceDep) -> LoginResponse:
    """
    Authenticate with username (or email) and password.

    Returns:
        Bearer token valid for 24 hours and the admin profile
    """
    return await service.login(request.username, request.password)


@router.post(
    "/register",
    response_model=AdminEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new admin",
)
async def register_admin(
    request: AdminRegisterRequest,
    service: AdminServiceDep,
    current_admin: CurrentAdmin,
) -> AdminEnvelope:
    """
    Create an admin account.

    Requires the canManageAdmins capability or the super_admin role.
    Only super admins may create other super admins.
    """
    admin = await service.register(current_admin, request)
    return AdminEnvelope(admin=admin)


@router.get("/profile", response_model=AdminEnvelope, summary="Get own profile")
async def get_profile(current_admin: CurrentAdmin) -> AdminEnvelope:
    """Get the authenticated admin's profile."""
    return AdminEnvelope(admin=to_public(current_admin))


@router.put("/profile", response_model=AdminEnvelope, summary="Update own profile")
async def update_profile(
    request: AdminProfileUpdate,
    service: AdminServiceDep,
    current_admin: CurrentAdmin,
) -> AdminEnvelope:
    """Update the authenticated admin's full name and email."""
    admin = await service.update_profile(current_admin, request)
    return AdminEnvelope(admin=admin)


@router.put("/change-password", response_model=MessageResponse, summary="Change own password")
async def change_password(
    request: ChangePasswordRequest,
    service: AdminServiceDep,
    current_admin: CurrentAdmin,
) -> MessageResponse:
    """Change the authenticated admin's password."""
    await service.change_password(
        current_admin, request.current_password, request.new_password
    )
    return MessageResponse(message="Password changed successfully.")


@router.get("/list", response_model=AdminListResponse, summary="List all admins")
async def list_admins(service: AdminServiceDep, current_admin: CurrentAdmin) -> AdminListResponse:
    """
    List all admins, newest first.

    Requires the canManageAdmins capability or the super_admin role.
    """
    return await service.list_admins(current_admin)


@router.post("/verify-token", response_model=AdminEnvelope, summary="Verify bearer token")
async def verify_token(current_admin: CurrentAdmin) -> AdminEnvelope:
    """Confirm the bearer token is valid and return its admin."""
    return AdminEnvelope(admin=to_public(current_admin))


@router.patch("/{admin_id}", response_model=AdminEnvelope, summary="Update another admin")
async def update_admin(
    admin_id: UUID,
    request: AdminUpdate,
    service: AdminServiceDep,
    current_admin: CurrentAdmin,
) -> AdminEnvelope:
    """
    Change an admin's role, permissions or status.

    Requires the canManageAdmins capability or the super_admin role.
    Super admin accounts can only be changed by super admins.
    """
    admin = await service.update_admin(current_admin, admin_id, request)
    return AdminEnvelope(admin=admin)
