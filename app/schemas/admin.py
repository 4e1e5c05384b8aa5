"""Admin account schemas."""

from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"
PASSWORD_MIN_LENGTH = 6


class AdminRole(StrEnum):
    """Closed set of admin roles."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    MODERATOR = "moderator"


class AdminStatus(StrEnum):
    """Account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class Capability(StrEnum):
    """Named capability flags stored in the permissions map."""

    CREATE_EVENTS = "can_create_events"
    EDIT_EVENTS = "can_edit_events"
    DELETE_EVENTS = "can_delete_events"
    MANAGE_ADMINS = "can_manage_admins"
    VIEW_ANALYTICS = "can_view_analytics"


class CamelModel(BaseModel):
    """Base schema exposing camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AdminPermissions(CamelModel):
    """Capability flags with their defaults."""

    can_create_events: bool = True
    can_edit_events: bool = True
    can_delete_events: bool = True
    can_manage_admins: bool = False
    can_view_analytics: bool = True

    @classmethod
    def all_granted(cls) -> "AdminPermissions":
        """Permissions with every capability enabled."""
        return cls(**{capability.value: True for capability in Capability})


class AdminPermissionsUpdate(CamelModel):
    """Partial capability update; unset flags keep their stored value."""

    can_create_events: bool | None = None
    can_edit_events: bool | None = None
    can_delete_events: bool | None = None
    can_manage_admins: bool | None = None
    can_view_analytics: bool | None = None


class AdminRegisterRequest(CamelModel):
    """Registration request body; required fields are enforced by the service."""

    username: str | None = None
    email: str | None = None
    password: str | None = None
    full_name: str | None = None
    role: str | None = None
    permissions: dict[str, Any] | None = None


class AdminCreate(CamelModel):
    """Validated data for a new admin account."""

    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)
    full_name: str = Field(..., min_length=1, max_length=100)
    role: AdminRole = AdminRole.ADMIN
    permissions: AdminPermissions = Field(default_factory=AdminPermissions)

    @field_validator("username", "full_name", mode="before")
    @classmethod
    def strip_whitespace(cls, value: Any) -> Any:
        """Trim surrounding whitespace before length checks."""
        return value.strip() if isinstance(value, str) else value

    @field_validator("username", "email")
    @classmethod
    def lowercase(cls, value: str) -> str:
        """Store identity fields lower-cased for case-insensitive uniqueness."""
        return value.lower()


class AdminProfileUpdate(CamelModel):
    """Self-service profile update."""

    full_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None

    @field_validator("full_name", mode="before")
    @classmethod
    def strip_whitespace(cls, value: Any) -> Any:
        """Trim surrounding whitespace before length checks."""
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def lowercase(cls, value: str | None) -> str | None:
        """Store email lower-cased."""
        return value.lower() if value else value


class AdminUpdate(CamelModel):
    """Role, permission and status changes made by a managing admin."""

    role: AdminRole | None = None
    permissions: AdminPermissionsUpdate | None = None
    status: AdminStatus | None = None


class AdminResponse(CamelModel):
    """Public admin view without password hash or lockout state."""

    id: UUID
    username: str
    email: str
    full_name: str
    role: AdminRole
    permissions: AdminPermissions
    status: AdminStatus
    last_login: datetime | None = None
    created_by: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AdminEnvelope(BaseModel):
    """Single admin response wrapper."""

    admin: AdminResponse


class AdminListResponse(BaseModel):
    """Response schema for admin listing."""

    admins: list[AdminResponse]
    total: int
