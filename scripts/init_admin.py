#!/usr/bin/env python3
"""Create the first super admin and a regular admin on an empty database."""

import asyncio
import sys

from app.config import settings
from app.database import AsyncSessionLocal, engine
from app.dependencies import get_password_hasher
from app.middleware.logging import configure_logging
from app.services.admin_bootstrap import bootstrap_admins
from app.services.admin_store import AdminStore


async def main() -> int:
    """Run the admin bootstrap."""
    configure_logging(settings)

    try:
        async with AsyncSessionLocal() as session:
            store = AdminStore(session, get_password_hasher())
            try:
                created = await bootstrap_admins(store, settings)
            except RuntimeError as e:
                print(f"❌ {e}")
                return 1
    finally:
        await engine.dispose()

    if not created:
        print("ℹ️  Admins already exist. Skipping initialization.")
        print("Use the admin dashboard or API to create more admins.")
        return 0

    for admin in created:
        print(f"🎉 Created {admin['role']}: {admin['username']} <{admin['email']}>")

    print("\n⚠️  IMPORTANT: Change the seeded passwords after first login!")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
