"""Admin account model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Uuid,
    text,
)

metadata = MetaData()

admins = Table(
    "admins",
    metadata,
    Column("id", Uuid(as_uuid=True), primary_key=True, default=uuid4),
    # Identity (stored lower-cased, unique ignoring case)
    Column("username", String(30), nullable=False, unique=True, index=True),
    Column("email", String(255), nullable=False, unique=True, index=True),
    Column("password_hash", String(255), nullable=False),
    Column("full_name", String(100), nullable=False),
    # Authorization
    Column("role", String(20), nullable=False, server_default=text("'admin'"), index=True),
    Column("permissions", JSON, nullable=False),
    Column("status", String(20), nullable=False, server_default=text("'active'"), index=True),
    # Lockout state
    Column("failed_login_attempts", Integer, nullable=False, server_default=text("0")),
    Column("locked_until", DateTime(timezone=True)),
    Column("last_login_at", DateTime(timezone=True)),
    # Weak back-reference to the creating admin, lookup only
    Column("created_by", Uuid(as_uuid=True)),
    # Audit
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)
