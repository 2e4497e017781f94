import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from shikshan.auth.models import Parent, Teacher, User
from shikshan.auth.security import verify_password
from shikshan.core.config import Settings
from shikshan.core.enums import UserRole
from shikshan.core.exceptions import ConfigurationError
from shikshan.core.id_service import is_valid_custom_id
from shikshan.core.models import Event, School, SchoolClass, Student, StudentParent, Subscription
from shikshan.db.run_seeders import run_seeders
from shikshan.db.seed_demo_data import DEMO_USER_EMAILS, seed_demo_data
from shikshan.db.seed_subscriptions import DEFAULT_PLANS, seed_subscriptions
from shikshan.db.seed_super_admin import seed_super_admin


async def _count(db: AsyncSession, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


async def test_seed_subscriptions_is_idempotent(db_session: AsyncSession) -> None:
    assert await seed_subscriptions(db_session) == len(DEFAULT_PLANS)
    assert await seed_subscriptions(db_session) == 0

    plans = (await db_session.execute(select(Subscription).order_by(Subscription.sort_order))).scalars().all()
    assert [p.name for p in plans] == ["Starter", "Super", "Advanced"]
    assert [p.is_popular for p in plans] == [False, True, False]
    assert all(plans[2].features.values())


async def test_seed_super_admin_from_settings(db_session: AsyncSession, settings: Settings) -> None:
    user = await seed_super_admin(db_session, settings)

    assert user.email == "root@example.com"
    assert user.role == UserRole.SUPER_ADMIN.value
    assert user.school_id is None
    assert is_valid_custom_id(user.custom_id, "users")
    assert verify_password(settings.super_admin_password, user.password_hash)
    assert await seed_super_admin(db_session, settings) is None
    assert await _count(db_session, User) == 1


async def test_seed_super_admin_requires_credentials(db_session: AsyncSession, settings: Settings) -> None:
    settings.super_admin_password = None

    with pytest.raises(ConfigurationError):
        await seed_super_admin(db_session, settings)


async def test_seed_demo_data_is_idempotent(db_session: AsyncSession, settings: Settings) -> None:
    first = await seed_demo_data(db_session, settings)
    counts = {model: await _count(db_session, model) for model in (School, User, SchoolClass, Student, Event)}

    second = await seed_demo_data(db_session, settings)

    assert {model: await _count(db_session, model) for model in counts} == counts
    assert counts[User] == len(DEMO_USER_EMAILS)
    assert second["school"].id == first["school"].id
    assert first["class"].class_teacher_id == first["teacher"].id
    assert first["principal"].employee_id != first["teacher"].employee_id
    assert await _count(db_session, Teacher) == 1
    assert await _count(db_session, Parent) == 1
    link = (await db_session.execute(select(StudentParent))).scalar_one()
    assert (link.student_id, link.parent_id, link.is_primary) == (first["student"].id, first["parent"].id, True)
    assert verify_password(settings.demo_user_password, first["parent"].password_hash)


async def test_seed_demo_data_requires_password(db_session: AsyncSession, settings: Settings) -> None:
    settings.demo_user_password = None

    with pytest.raises(ConfigurationError):
        await seed_demo_data(db_session, settings)
    assert await _count(db_session, School) == 0


async def test_run_seeders_twice(engine: AsyncEngine, db_session: AsyncSession, settings: Settings) -> None:
    await run_seeders(engine, settings=settings)
    await run_seeders(engine, settings=settings)

    assert await _count(db_session, Subscription) == len(DEFAULT_PLANS)
    assert await _count(db_session, User) == len(DEMO_USER_EMAILS) + 1
    assert await _count(db_session, School) == 1


async def test_run_seeders_skip_demo(engine: AsyncEngine, db_session: AsyncSession, settings: Settings) -> None:
    await run_seeders(engine, include_demo=False, settings=settings)

    assert await _count(db_session, School) == 0
    assert await _count(db_session, User) == 1
