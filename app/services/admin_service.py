"""Admin authentication and account management service."""

from uuid import UUID

import structlog
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import (
    AccountInactiveException,
    AccountLockedException,
    ConflictException,
    ForbiddenException,
    IncorrectPasswordException,
    InvalidCredentialsException,
    InvalidTokenException,
    NotFoundException,
    ValidationException,
)
from app.core.security import TokenService
from app.schemas.admin import (
    PASSWORD_MIN_LENGTH,
    AdminCreate,
    AdminListResponse,
    AdminPermissions,
    AdminProfileUpdate,
    AdminRegisterRequest,
    AdminResponse,
    AdminStatus,
    AdminUpdate,
)
from app.schemas.auth import LoginResponse
from app.services.admin_store import AdminStore
from app.services.authorization import (
    can_manage_admins,
    ensure_can_assign_role,
    is_super_admin,
)
from app.services.lockout import LockoutPolicy

logger = structlog.get_logger(__name__)


def _validation_message(exc: PydanticValidationError) -> str:
    """Flatten the first pydantic error into a user-facing message."""
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"])
    return f"{field}: {error['msg']}" if field else error["msg"]


def to_public(admin: dict) -> AdminResponse:
    """Build the public view of an admin, dropping credentials and lockout state."""
    return AdminResponse(
        id=admin["id"],
        username=admin["username"],
        email=admin["email"],
        full_name=admin["full_name"],
        role=admin["role"],
        permissions=AdminPermissions.model_validate(admin.get("permissions") or {}),
        status=admin["status"],
        last_login=admin.get("last_login_at"),
        created_by=admin.get("created_by"),
        created_at=admin.get("created_at"),
        updated_at=admin.get("updated_at"),
    )


class AdminService:
    """Orchestrates credential checks, lockout, tokens and permission gates."""

    def __init__(self, store: AdminStore, lockout: LockoutPolicy, tokens: TokenService):
        """Initialize service with its collaborators."""
        self.store = store
        self.lockout = lockout
        self.tokens = tokens

    async def _verify_password(self, admin: dict, password: str) -> bool:
        return await run_in_threadpool(
            self.store.hasher.verify, password, admin.get("password_hash")
        )

    async def login(self, username: str | None, password: str | None) -> LoginResponse:
        """
        Authenticate an admin by username or email.

        Failed attempts are committed before the error is raised, so the
        lockout state changes even though the call fails.

        Args:
            username: Username or email
            password: Plaintext password

        Returns:
            Access token and public admin view

        Raises:
            ValidationException: If a field is missing
            InvalidCredentialsException: If the account is unknown or the password is wrong
            AccountLockedException: If the account is locked
            AccountInactiveException: If the account is not active
        """
        if not username or not password:
            raise ValidationException("Username and password are required.")

        logger.info("admin_login_attempt", username=username)

        admin = await self.store.get_by_login(username)
        if not admin:
            await run_in_threadpool(self.store.hasher.verify_dummy, password)
            logger.warning("admin_login_failed", username=username, reason="not_found")
            raise InvalidCredentialsException()

        if self.lockout.is_locked(admin):
            logger.warning(
                "admin_login_failed",
                username=username,
                reason="locked",
                locked_until=admin["locked_until"].isoformat(),
            )
            raise AccountLockedException()

        if admin["status"] != AdminStatus.ACTIVE:
            logger.warning(
                "admin_login_failed", username=username, reason="inactive", status=admin["status"]
            )
            raise AccountInactiveException()

        if not await self._verify_password(admin, password):
            await self.lockout.record_failure(admin)
            logger.warning(
                "admin_login_failed",
                username=username,
                reason="bad_password",
                failed_attempts=(admin.get("failed_login_attempts") or 0) + 1,
            )
            raise InvalidCredentialsException()

        await self.lockout.record_success(admin)
        token = self.tokens.issue(admin["id"])

        refreshed = await self.store.get_by_id(admin["id"]) or admin
        logger.info("admin_login_succeeded", username=username, admin_id=str(admin["id"]))

        return LoginResponse(token=token, admin=to_public(refreshed))

    async def verify_request(self, token: str) -> dict:
        """
        Resolve the admin behind a bearer token.

        The account is always reloaded from the store; only the id is taken
        from the token.

        Raises:
            InvalidTokenException: If the token is invalid or the admin no longer exists
            AccountInactiveException: If the admin is not active
        """
        try:
            admin_id = self.tokens.verify(token)
        except InvalidTokenException as e:
            logger.warning("token_rejected", reason=e.message)
            raise

        admin = await self.store.get_by_id(admin_id)
        if not admin:
            logger.warning("token_rejected", reason="admin_not_found", admin_id=str(admin_id))
            raise InvalidTokenException("Invalid token. Admin not found.")

        if admin["status"] != AdminStatus.ACTIVE:
            logger.warning(
                "token_rejected",
                reason="inactive",
                admin_id=str(admin_id),
                status=admin["status"],
            )
            raise AccountInactiveException("Account is inactive or suspended.")

        return admin

    async def register(self, requester: dict, request: AdminRegisterRequest) -> AdminResponse:
        """
        Create a new admin account on behalf of a managing admin.

        Raises:
            ForbiddenException: If the requester cannot manage admins or grant the role
            ValidationException: If fields are missing or malformed
            ConflictException: If the username or email is taken
        """
        if not can_manage_admins(requester):
            logger.warning("admin_register_denied", requester=requester["username"])
            raise ForbiddenException(
                "Access denied. You do not have permission to create admin accounts."
            )

        if not (request.username and request.email and request.password and request.full_name):
            raise ValidationException("Username, email, password, and full name are required.")

        try:
            data = AdminCreate.model_validate(request.model_dump(exclude_none=True))
        except PydanticValidationError as e:
            message = _validation_message(e)
            logger.info("admin_register_invalid", username=request.username, error=message)
            raise ValidationException(message) from e

        if await self.store.exists(data.username, data.email):
            logger.info("admin_register_conflict", username=data.username)
            raise ConflictException()

        ensure_can_assign_role(requester, data.role)

        admin = await self.store.insert(data, created_by=requester["id"])
        logger.info(
            "admin_created",
            username=admin["username"],
            role=admin["role"],
            created_by=requester["username"],
        )

        return to_public(admin)

    async def update_profile(self, admin: dict, data: AdminProfileUpdate) -> AdminResponse:
        """
        Update the caller's own name and email.

        Raises:
            ConflictException: If the email belongs to another admin
        """
        values: dict = {}
        if data.full_name:
            values["full_name"] = data.full_name

        if data.email:
            if await self.store.get_by_email(data.email, exclude_id=admin["id"]):
                raise ConflictException("Email already exists.")
            values["email"] = data.email

        updated = await self.store.update_fields(admin["id"], **values)
        if not updated:
            raise NotFoundException("Admin not found")

        logger.info("admin_profile_updated", admin_id=str(admin["id"]), fields=sorted(values))
        return to_public(updated)

    async def change_password(
        self, admin: dict, current_password: str | None, new_password: str | None
    ) -> None:
        """
        Replace the caller's password after checking the current one.

        Raises:
            ValidationException: If a field is missing or the new password is too short
            IncorrectPasswordException: If the current password does not match
        """
        if not current_password or not new_password:
            raise ValidationException("Current password and new password are required.")

        if len(new_password) < PASSWORD_MIN_LENGTH:
            raise ValidationException(
                f"Password must be at least {PASSWORD_MIN_LENGTH} characters long."
            )

        if not await self._verify_password(admin, current_password):
            logger.warning("password_change_rejected", admin_id=str(admin["id"]))
            raise IncorrectPasswordException()

        await self.store.set_password(admin["id"], new_password)
        logger.info("password_changed", admin_id=str(admin["id"]))

    async def list_admins(self, requester: dict) -> AdminListResponse:
        """List all admins, newest first."""
        if not can_manage_admins(requester):
            logger.warning("admin_list_denied", requester=requester["username"])
            raise ForbiddenException(
                "Access denied. You do not have permission to view admin accounts."
            )

        admins = [to_public(admin) for admin in await self.store.list_all()]
        return AdminListResponse(admins=admins, total=len(admins))

    async def update_admin(
        self, requester: dict, admin_id: UUID, data: AdminUpdate
    ) -> AdminResponse:
        """
        Change another admin's role, permissions or status.

        Raises:
            ForbiddenException: If the requester may not make this change
            NotFoundException: If the admin does not exist
        """
        if not can_manage_admins(requester):
            raise ForbiddenException(
                "Access denied. You do not have permission to manage admin accounts."
            )

        target = await self.store.get_by_id(admin_id)
        if not target:
            raise NotFoundException("Admin not found")

        if is_super_admin(target) and not is_super_admin(requester):
            raise ForbiddenException(
                "Only super administrators can modify super administrator accounts."
            )

        if target["id"] == requester["id"] and (data.role is not None or data.status is not None):
            raise ForbiddenException("You cannot change your own role or status.")

        values: dict = {}
        if data.role is not None:
            ensure_can_assign_role(requester, data.role)
            values["role"] = data.role.value

        if data.permissions is not None:
            current = AdminPermissions.model_validate(target.get("permissions") or {})
            values["permissions"] = {
                **current.model_dump(),
                **data.permissions.model_dump(exclude_none=True),
            }

        if data.status is not None:
            values["status"] = data.status.value

        updated = await self.store.update_fields(admin_id, **values)
        if not updated:
            raise NotFoundException("Admin not found")

        logger.info(
            "admin_updated",
            admin_id=str(admin_id),
            fields=sorted(values),
            updated_by=requester["username"],
        )
        return to_public(updated)
