#!/usr/bin/env python3
"""Create the admins table directly, for local setups that skip Alembic."""

import asyncio
import sys

from app.database import engine
from app.models import metadata


async def main() -> int:
    """Create every table in the admin metadata."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
    finally:
        await engine.dispose()

    print(f"✓ Admin tables ready on {engine.url.render_as_string(hide_password=True)}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
