"""
Seed script: creates a default organization and a global admin.

Usage:
    python -m workforce.db.seed
"""

import asyncio
import logging

from sqlalchemy import select

from workforce.core.config import settings
from workforce.core.security import hash_password
from workforce.db.models import Organization, User
from workforce.db.session import AsyncSessionLocal

logger = logging.getLogger(__name__)

DEFAULT_ORGANIZATION = "Default Organization"


async def create_organization(session) -> Organization:
    result = await session.execute(
        select(Organization).where(Organization.name == DEFAULT_ORGANIZATION)
    )
    org = result.scalar_one_or_none()
    if org:
        logger.info("Organization '%s' already exists, skipping.", DEFAULT_ORGANIZATION)
        return org

    org = Organization(name=DEFAULT_ORGANIZATION, timezone=settings.DEFAULT_TIMEZONE)
    session.add(org)
    await session.flush()
    logger.info("Created organization: id=%s", org.id)
    return org


async def create_admin(session) -> User:
    result = await session.execute(select(User).where(User.username == "admin"))
    admin = result.scalar_one_or_none()
    if admin:
        logger.info("Admin user already exists, skipping.")
        return admin

    admin = User(
        username="admin",
        password_hash=hash_password("admin123"),
        role="admin",
        full_name="System Administrator",
        is_active=True,
    )
    session.add(admin)
    await session.flush()
    logger.info("Created admin user: id=%s", admin.id)
    return admin


async def main():
    async with AsyncSessionLocal() as session:
        async with session.begin():
            await create_organization(session)
            await create_admin(session)
    logger.info("Seed complete.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
