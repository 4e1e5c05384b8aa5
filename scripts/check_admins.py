#!/usr/bin/env python3
"""List existing admin accounts."""

import asyncio
import sys

from app.database import AsyncSessionLocal, engine
from app.dependencies import get_password_hasher
from app.services.admin_store import AdminStore


async def main() -> int:
    """Print every admin with its creation date."""
    try:
        async with AsyncSessionLocal() as session:
            admins = await AdminStore(session, get_password_hasher()).list_all()
    finally:
        await engine.dispose()

    print("\n📋 Existing Admin Users:")
    print("========================")

    if not admins:
        print("❌ No admin users found")

    for index, admin in enumerate(admins, start=1):
        print(f"{index}. Username: {admin['username']}")
        print(f"   Email: {admin['email']}")
        print(f"   Role: {admin['role']} ({admin['status']})")
        print(f"   Created: {admin['created_at']}")
        print("   ---")

    print(f"\n📊 Total Admin Users: {len(admins)}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
