"""
Create a throwaway school with an admin and a teacher for manual testing.

The password is read from TEST_USER_PASSWORD (or --password); there is no
default. Existing rows with the same emails are reused.

Usage:
  python -m shikshan.scripts.create_test_user
  python -m shikshan.scripts.create_test_user --password "$(secret-tool lookup app test-user)"
"""
import argparse
import asyncio
import sys
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shikshan.auth.models import User
from shikshan.auth.security import hash_password
from shikshan.core.config import get_settings
from shikshan.core.enums import UserRole
from shikshan.core.exceptions import ConfigurationError
from shikshan.core.id_service import next_custom_id, next_employee_id
from shikshan.core.logging import configure_logging
from shikshan.core.models import School
from shikshan.db.session import create_engine, create_session_factory

TEST_SCHOOL_EMAIL = "test@school.com"
TEST_ADMIN_EMAIL = "admin@test.com"
TEST_TEACHER_EMAIL = "teacher@test.com"
TEST_USER_PHONE = "1234567890"


async def create_test_users(db: AsyncSession, password: Optional[str]) -> Dict[str, object]:
    if not password:
        raise ConfigurationError("TEST_USER_PASSWORD must be set to create test users")

    result = await db.execute(select(School).where(School.email == TEST_SCHOOL_EMAIL))
    school = result.scalar_one_or_none()
    if school is None:
        school = School(
            custom_id=await next_custom_id(db, School),
            name="Test School",
            email=TEST_SCHOOL_EMAIL,
            phone="1234567890",
            address="Test Address",
            is_active=True,
        )
        db.add(school)
        await db.flush()
        print("Created test school:", school.custom_id)

    password_hash = hash_password(password)
    users = {}
    for key, email, role, first_name, last_name in (
        ("admin", TEST_ADMIN_EMAIL, UserRole.SCHOOL_ADMIN, "Test", "Admin"),
        ("teacher", TEST_TEACHER_EMAIL, UserRole.TEACHER, "Test", "Teacher"),
    ):
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(
                custom_id=await next_custom_id(db, User),
                email=email,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                phone=TEST_USER_PHONE,
                role=role.value,
                school_id=school.id,
                employee_id=await next_employee_id(db),
                is_active=True,
                email_verified=True,
            )
            db.add(user)
            await db.flush()
            print(f"Created {role.value}:", email)
        else:
            print(f"{role.value} already exists:", email)
        users[key] = user

    await db.commit()
    return {"school": school, **users}


async def main(password: Optional[str]) -> int:
    engine = create_engine()
    try:
        async with create_session_factory(engine)() as db:
            try:
                await create_test_users(db, password)
            except ConfigurationError as e:
                print("Configuration error:", e.message)
                return 1
            except Exception as e:
                await db.rollback()
                print("Error:", e)
                raise
    finally:
        await engine.dispose()
    print("Test users ready. Sign in with TEST_USER_PASSWORD.")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a test school with an admin and a teacher")
    parser.add_argument("--password", default=None, help="Overrides TEST_USER_PASSWORD")
    args = parser.parse_args()
    configure_logging()
    sys.exit(asyncio.run(main(args.password or get_settings().test_user_password)))
