#!/usr/bin/env python3
"""
Initialize default database values.
Run on startup to make sure the trip has an admin account.
"""

import asyncio
import logging
import os

from sqlalchemy.ext.asyncio import async_sessionmaker

from golftrip.database import db
from golftrip.services import user_service
from golftrip.utils.errors import DuplicateEmail

logger = logging.getLogger(__name__)


async def init_defaults(session_factory: async_sessionmaker) -> bool:
    """
    Create the bootstrap admin from ``BOOTSTRAP_ADMIN_EMAIL`` /
    ``BOOTSTRAP_ADMIN_PASSWORD`` (and optional ``BOOTSTRAP_ADMIN_NAME``)
    when no admin exists yet.

    Returns:
        True if an admin was created
    """
    email = os.getenv("BOOTSTRAP_ADMIN_EMAIL")
    password = os.getenv("BOOTSTRAP_ADMIN_PASSWORD")
    if not email or not password:
        return False

    async with session_factory() as session:
        if await user_service.has_admin(session):
            logger.info("Admin account already exists")
            return False

        name = os.getenv("BOOTSTRAP_ADMIN_NAME", "Admin")
        try:
            await user_service.create_user(session, email, password, name, is_admin=True)
        except DuplicateEmail:
            logger.warning(f"Bootstrap admin email {email} belongs to a non-admin account; not promoted")
            return False

    logger.info(f"✓ Created bootstrap admin {email}")
    return True


async def main():
    engine = db.create_engine()
    try:
        await db.init_database(engine)
        await init_defaults(db.create_session_factory(engine))
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
