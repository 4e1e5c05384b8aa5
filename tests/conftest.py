import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime, timedelta

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

# Configure the app for tests before any app module reads settings
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["JWT_SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_FORMAT"] = "console"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import settings
from app.core.security import PasswordHasher, TokenService
from app.database import engine_options, get_db, to_async_url
from app.dependencies import get_clock, get_password_hasher
from app.main import app
from app.models import metadata
from app.schemas.admin import AdminCreate, AdminPermissions, AdminRole, AdminStatus
from app.services.admin_service import AdminService
from app.services.admin_store import AdminStore
from app.services.lockout import LockoutPolicy

DEFAULT_PASSWORD = "Secret123!"

AdminFactory = Callable[..., Awaitable[dict]]


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    """Frozen clock shared by the service and the app."""
    return FrozenClock(datetime(2026, 10, 19, 9, 0, tzinfo=UTC))


@pytest.fixture
def hasher() -> PasswordHasher:
    """Cheap bcrypt hasher for tests."""
    return PasswordHasher(rounds=settings.bcrypt_rounds)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on a freshly created schema."""
    url = to_async_url(TEST_DATABASE_URL)
    test_engine = create_async_engine(url, **engine_options(url))

    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)

    await test_engine.dispose()


@pytest.fixture
def store(db_session: AsyncSession, hasher: PasswordHasher, clock: FrozenClock) -> AdminStore:
    """Admin store bound to the test session."""
    return AdminStore(db_session, hasher, clock)


@pytest.fixture
def tokens(clock: FrozenClock) -> TokenService:
    """Token service using the app's signing configuration."""
    return TokenService(
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expire_hours=settings.jwt_expire_hours,
        clock=clock,
    )


@pytest.fixture
def lockout(store: AdminStore, clock: FrozenClock) -> LockoutPolicy:
    """Lockout policy with production thresholds."""
    return LockoutPolicy(store, clock=clock)


@pytest.fixture
def service(store: AdminStore, lockout: LockoutPolicy, tokens: TokenService) -> AdminService:
    """Admin service wired with test collaborators."""
    return AdminService(store, lockout, tokens)


@pytest.fixture
def create_admin(store: AdminStore) -> AdminFactory:
    """Factory inserting admins straight into the store."""

    async def _create(
        username: str,
        *,
        role: AdminRole = AdminRole.ADMIN,
        permissions: AdminPermissions | None = None,
        status: AdminStatus = AdminStatus.ACTIVE,
        password: str = DEFAULT_PASSWORD,
        email: str | None = None,
        created_by=None,
    ) -> dict:
        admin = await store.insert(
            AdminCreate(
                username=username,
                email=email or f"{username}@cem.edu.lk",
                password=password,
                full_name=username.replace("_", " ").title(),
                role=role,
                permissions=permissions or AdminPermissions(),
            ),
            created_by=created_by,
        )
        if status is not AdminStatus.ACTIVE:
            admin = await store.update_fields(admin["id"], status=status.value)
        return admin

    return _create


@pytest_asyncio.fixture
async def super_admin(create_admin: AdminFactory) -> dict:
    """Super admin with every permission."""
    return await create_admin(
        "superadmin",
        role=AdminRole.SUPER_ADMIN,
        permissions=AdminPermissions.all_granted(),
    )


@pytest_asyncio.fixture
async def event_admin(create_admin: AdminFactory) -> dict:
    """Regular admin without the manage-admins capability."""
    return await create_admin("event_admin")


@pytest_asyncio.fixture
async def manager(create_admin: AdminFactory) -> dict:
    """Regular admin granted the manage-admins capability."""
    return await create_admin(
        "manager",
        permissions=AdminPermissions(can_manage_admins=True),
    )


@pytest.fixture
def auth_headers(tokens: TokenService) -> Callable[[dict], dict]:
    """Build bearer headers for an admin."""

    def _headers(admin: dict) -> dict:
        return {"Authorization": f"Bearer {tokens.issue(admin['id'])}"}

    return _headers


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, hasher: PasswordHasher, clock: FrozenClock
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_password_hasher] = lambda: hasher

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def api() -> str:
    """Prefix of the admin API."""
    return f"{settings.api_v1_prefix}/admin"


@pytest.fixture
def admin_password() -> str:
    """Password every factory-created admin starts with."""
    return DEFAULT_PASSWORD
