"""
Seed script to create the platform super admin.

Credentials come from the environment only (no defaults):
  SUPER_ADMIN_EMAIL=admin@example.com
  SUPER_ADMIN_PASSWORD=<from your secret store>

Idempotent: an existing user with that email is left untouched.
Usage: python -m shikshan.db.seed_super_admin
"""
import asyncio
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shikshan.auth.models import User
from shikshan.auth.security import hash_password
from shikshan.core.config import Settings, get_settings
from shikshan.core.enums import UserRole
from shikshan.core.exceptions import ConfigurationError
from shikshan.core.id_service import next_custom_id
from shikshan.db.session import create_engine, create_session_factory

SUPER_ADMIN_PHONE = "9999999999"


async def seed_super_admin(db: AsyncSession, settings: Optional[Settings] = None) -> Optional[User]:
    """Create the super admin. Returns the new user, or None when it already exists."""
    settings = settings or get_settings()
    if not settings.super_admin_email or not settings.super_admin_password:
        raise ConfigurationError("SUPER_ADMIN_EMAIL and SUPER_ADMIN_PASSWORD must be set to seed the super admin")

    email = settings.super_admin_email.strip().lower()
    result = await db.execute(select(User).where(User.email == email))
    existing = result.scalar_one_or_none()
    if existing is not None:
        print("Super admin already exists, skipping:", email)
        return None

    user = User(
        custom_id=await next_custom_id(db, User),
        first_name="Super",
        last_name="Admin",
        email=email,
        phone=SUPER_ADMIN_PHONE,
        password_hash=hash_password(settings.super_admin_password),
        role=UserRole.SUPER_ADMIN.value,
        school_id=None,
        is_active=True,
        email_verified=True,
        phone_verified=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    print("Created super admin:", email)
    return user


async def main() -> None:
    engine = create_engine()
    try:
        async with create_session_factory(engine)() as db:
            try:
                await seed_super_admin(db)
            except Exception as e:
                await db.rollback()
                print("Error:", e)
                raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
