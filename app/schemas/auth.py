"""Authentication schemas."""

from pydantic import BaseModel

from app.schemas.admin import AdminResponse, CamelModel


class LoginRequest(BaseModel):
    """Admin login request; `username` accepts a username or an email."""

    username: str | None = None
    password: str | None = None


class LoginResponse(CamelModel):
    """Login response with token and admin info."""

    token: str
    token_type: str = "bearer"
    admin: AdminResponse


class ChangePasswordRequest(CamelModel):
    """Password change request schema."""

    current_password: str | None = None
    new_password: str | None = None


class MessageResponse(BaseModel):
    """Plain message response."""

    message: str
