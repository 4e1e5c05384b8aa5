"""Credential store for admin accounts."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictException
from app.core.security import Clock, PasswordHasher, ensure_utc, utcnow
from app.models.admins import admins
from app.schemas.admin import AdminCreate, AdminStatus

_DATETIME_COLUMNS = ("locked_until", "last_login_at", "created_at", "updated_at")

# Columns that only set_password and the lockout helpers may write
_PROTECTED_COLUMNS = frozenset(
    {"id", "password_hash", "failed_login_attempts", "locked_until", "created_at"}
)


class AdminStore:
    """Persistence for admin accounts.

    Username and email are lower-cased before they reach this layer, so the
    unique indexes on those columns enforce case-insensitive uniqueness.
    """

    def __init__(self, db: AsyncSession, hasher: PasswordHasher, clock: Clock = utcnow):
        """Initialize store with a database session and password hasher."""
        self.db = db
        self.hasher = hasher
        self.clock = clock

    @staticmethod
    def _to_dict(row: Any) -> dict:
        """Convert a result mapping to a plain dict with aware datetimes."""
        admin = dict(row)
        for key in _DATETIME_COLUMNS:
            admin[key] = ensure_utc(admin.get(key))
        return admin

    async def _fetch_one(self, query: Any) -> dict | None:
        result = await self.db.execute(query)
        row = result.mappings().first()
        return self._to_dict(row) if row else None

    async def get_by_id(self, admin_id: UUID) -> dict | None:
        """Get admin by ID."""
        return await self._fetch_one(select(admins).where(admins.c.id == admin_id))

    async def get_by_login(self, identifier: str) -> dict | None:
        """Get admin whose username or email matches, ignoring case."""
        identifier = identifier.strip().lower()
        query = select(admins).where(
            or_(admins.c.username == identifier, admins.c.email == identifier)
        )
        return await self._fetch_one(query)

    async def get_by_email(self, email: str, exclude_id: UUID | None = None) -> dict | None:
        """Get admin by email, optionally ignoring one account."""
        query = select(admins).where(admins.c.email == email.strip().lower())
        if exclude_id is not None:
            query = query.where(admins.c.id != exclude_id)
        return await self._fetch_one(query)

    async def exists(self, username: str, email: str) -> bool:
        """Check whether the username or email is already taken."""
        query = (
            select(func.count())
            .select_from(admins)
            .where(
                or_(
                    admins.c.username == username.strip().lower(),
                    admins.c.email == email.strip().lower(),
                )
            )
        )
        result = await self.db.execute(query)
        return result.scalar_one() > 0

    async def insert(self, data: AdminCreate, created_by: UUID | None = None) -> dict:
        """Create a new admin, hashing the plaintext password."""
        password_hash = await run_in_threadpool(self.hasher.hash, data.password)
        now = self.clock()

        query = (
            admins.insert()
            .values(
                id=uuid4(),
                username=data.username,
                email=data.email,
                password_hash=password_hash,
                full_name=data.full_name,
                role=data.role.value,
                permissions=data.permissions.model_dump(),
                status=AdminStatus.ACTIVE.value,
                failed_login_attempts=0,
                created_by=created_by,
                created_at=now,
                updated_at=now,
            )
            .returning(admins)
        )

        try:
            result = await self.db.execute(query)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictException() from e

        admin = result.mappings().first()
        if not admin:
            raise ValueError("Failed to create admin")

        return self._to_dict(admin)

    async def update_fields(self, admin_id: UUID, **values: Any) -> dict | None:
        """Update profile, role, permission or status columns.

        Passwords and lockout state have their own methods, so updating other
        fields never re-hashes the password.
        """
        protected = _PROTECTED_COLUMNS.intersection(values)
        if protected:
            raise ValueError(f"Cannot update protected columns: {sorted(protected)}")

        if not values:
            return await self.get_by_id(admin_id)

        values["updated_at"] = self.clock()
        query = update(admins).where(admins.c.id == admin_id).values(**values).returning(admins)

        try:
            result = await self.db.execute(query)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictException("Email already exists.") from e

        admin = result.mappings().first()
        return self._to_dict(admin) if admin else None

    async def set_password(self, admin_id: UUID, password: str) -> None:
        """Hash and store a new password."""
        password_hash = await run_in_threadpool(self.hasher.hash, password)
        query = (
            update(admins)
            .where(admins.c.id == admin_id)
            .values(password_hash=password_hash, updated_at=self.clock())
        )
        await self.db.execute(query)
        await self.db.commit()

    async def increment_failed_attempts(
        self, admin_id: UUID, locked_until: datetime | None = None
    ) -> None:
        """Atomically bump the failure counter, optionally setting a lock."""
        values: dict[str, Any] = {
            "failed_login_attempts": admins.c.failed_login_attempts + 1,
        }
        if locked_until is not None:
            values["locked_until"] = locked_until

        await self.db.execute(update(admins).where(admins.c.id == admin_id).values(**values))
        await self.db.commit()

    async def restart_failed_attempts(self, admin_id: UUID) -> None:
        """Start a fresh failure window after an expired lock."""
        query = (
            update(admins)
            .where(admins.c.id == admin_id)
            .values(failed_login_attempts=1, locked_until=None)
        )
        await self.db.execute(query)
        await self.db.commit()

    async def reset_failed_attempts(self, admin_id: UUID, last_login_at: datetime) -> None:
        """Clear lockout state and record a successful login."""
        query = (
            update(admins)
            .where(admins.c.id == admin_id)
            .values(failed_login_attempts=0, locked_until=None, last_login_at=last_login_at)
        )
        await self.db.execute(query)
        await self.db.commit()

    async def list_all(self) -> list[dict]:
        """List all admins, newest first."""
        query = select(admins).order_by(admins.c.created_at.desc())
        result = await self.db.execute(query)
        return [self._to_dict(row) for row in result.mappings().all()]

    async def count(self) -> int:
        """Count admin accounts."""
        result = await self.db.execute(select(func.count()).select_from(admins))
        return result.scalar_one()
