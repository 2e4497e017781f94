"""
Remove everything seed_demo_data created, in one transaction.

Only the demo school, its demo users, class, student, parent link and event
are deleted. The super admin and subscription plans are never touched.

Usage: python -m shikshan.scripts.clean_demo_data
"""
import asyncio
import logging
import sys
from typing import Dict

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from shikshan.auth.models import User
from shikshan.core.enums import UserRole
from shikshan.core.logging import configure_logging
from shikshan.core.models import Event, School, SchoolClass, Student, StudentParent
from shikshan.db.seed_demo_data import (
    DEMO_ADMISSION_NUMBER,
    DEMO_CLASS_NAME,
    DEMO_EVENT_TITLE,
    DEMO_SCHOOL_EMAIL,
    DEMO_USER_EMAILS,
)
from shikshan.db.session import create_engine, create_session_factory

logger = logging.getLogger(__name__)


async def clean_demo_data(db: AsyncSession) -> Dict[str, int]:
    """Delete demo rows, children first. Returns deleted row counts per table."""
    school_id = (await db.execute(select(School.id).where(School.email == DEMO_SCHOOL_EMAIL))).scalar_one_or_none()
    demo_users = select(User.id).where(User.email.in_(DEMO_USER_EMAILS), User.role != UserRole.SUPER_ADMIN.value)
    deleted: Dict[str, int] = {}

    try:
        if school_id is not None:
            result = await db.execute(
                delete(Event).where(Event.school_id == school_id, Event.title == DEMO_EVENT_TITLE)
            )
            deleted["events"] = result.rowcount
        student_ids = select(Student.id).where(Student.admission_number == DEMO_ADMISSION_NUMBER)
        result = await db.execute(
            delete(StudentParent)
            .where(StudentParent.student_id.in_(student_ids))
            .execution_options(synchronize_session=False)
        )
        deleted["student_parents"] = result.rowcount
        result = await db.execute(delete(Student).where(Student.admission_number == DEMO_ADMISSION_NUMBER))
        deleted["students"] = result.rowcount
        if school_id is not None:
            result = await db.execute(
                delete(SchoolClass).where(SchoolClass.school_id == school_id, SchoolClass.name == DEMO_CLASS_NAME)
            )
            deleted["classes"] = result.rowcount
        result = await db.execute(
            delete(User).where(User.id.in_(demo_users)).execution_options(synchronize_session=False)
        )
        deleted["users"] = result.rowcount
        if school_id is not None:
            result = await db.execute(delete(School).where(School.id == school_id))
            deleted["schools"] = result.rowcount
        await db.commit()
    except Exception:
        await db.rollback()
        logger.error("Demo data cleanup failed; nothing was deleted")
        raise

    return deleted


async def main() -> int:
    engine = create_engine()
    try:
        async with create_session_factory(engine)() as db:
            deleted = await clean_demo_data(db)
    finally:
        await engine.dispose()
    if not any(deleted.values()):
        print("No demo data found.")
        return 0
    for table, count in deleted.items():
        print(f"Deleted {count} row(s) from {table}")
    print("Demo data cleaned up.")
    return 0


if __name__ == "__main__":
    configure_logging()
    sys.exit(asyncio.run(main()))
