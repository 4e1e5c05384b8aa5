"""First-run creation of the initial admin accounts."""

import structlog

from app.config import INSECURE_SEED_PASSWORD, Settings
from app.schemas.admin import AdminCreate, AdminPermissions, AdminRole
from app.services.admin_store import AdminStore

logger = structlog.get_logger(__name__)


async def bootstrap_admins(store: AdminStore, settings: Settings) -> list[dict]:
    """
    Seed a super admin and a regular admin into an empty store.

    Does nothing when any admin already exists. Outside development the
    seed passwords must be overridden.

    Args:
        store: Admin credential store
        settings: Application settings holding the seed credentials

    Returns:
        Created admin dicts, empty when the store was already populated

    Raises:
        RuntimeError: If placeholder passwords are used outside development
    """
    existing = await store.count()
    if existing > 0:
        logger.info("admin_bootstrap_skipped", existing_admins=existing)
        return []

    placeholders = INSECURE_SEED_PASSWORD in (
        settings.seed_superadmin_password,
        settings.seed_admin_password,
    )
    if placeholders and not settings.is_development:
        raise RuntimeError(
            "SEED_SUPERADMIN_PASSWORD and SEED_ADMIN_PASSWORD must be set "
            "outside development."
        )

    super_admin = await store.insert(
        AdminCreate(
            username=settings.seed_superadmin_username,
            email=settings.seed_superadmin_email,
            password=settings.seed_superadmin_password,
            full_name="Super Administrator",
            role=AdminRole.SUPER_ADMIN,
            permissions=AdminPermissions.all_granted(),
        )
    )

    admin = await store.insert(
        AdminCreate(
            username=settings.seed_admin_username,
            email=settings.seed_admin_email,
            password=settings.seed_admin_password,
            full_name="Event Administrator",
            role=AdminRole.ADMIN,
            permissions=AdminPermissions(),
        ),
        created_by=super_admin["id"],
    )

    logger.info(
        "admin_bootstrap_completed",
        super_admin=super_admin["username"],
        admin=admin["username"],
    )
    if placeholders:
        logger.warning("admin_bootstrap_placeholder_passwords", note="Change them after first login")

    return [super_admin, admin]
