import uuid
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from shikshan.auth.models import User
from shikshan.core.config import Settings
from shikshan.core.enums import UserRole
from shikshan.core.models import School, SchoolClass, Student
from shikshan.db.session import Base, create_engine, create_session_factory
from shikshan.main import create_app

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def _unique() -> str:
    return uuid.uuid4().hex[:8]


@pytest.fixture()
def settings() -> Settings:
    """Settings isolated from the process environment and any .env file."""
    return Settings(
        _env_file=None,
        database_url_override=TEST_DATABASE_URL,
        super_admin_email="Root@Example.com",
        super_admin_password="not-a-real-secret-1",
        demo_user_password="not-a-real-secret-2",
        test_user_password="not-a-real-secret-3",
    )


@pytest.fixture()
async def engine(settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with every table created from the models."""
    db_engine = create_engine(TEST_DATABASE_URL, settings=settings)
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture()
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with create_session_factory(engine)() as session:
        yield session


@pytest.fixture()
async def client(engine: AsyncEngine) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to an app that uses the test engine."""
    app = create_app(engine)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_school(db_session: AsyncSession):
    async def _make(**overrides) -> School:
        suffix = _unique()
        fields = {"name": f"School {suffix}", "email": f"office-{suffix}@school.example.com", "phone": "9876500000"}
        fields.update(overrides)
        school = School(**fields)
        db_session.add(school)
        await db_session.flush()
        return school

    return _make


@pytest.fixture()
def make_user(db_session: AsyncSession):
    async def _make(school: School, role: UserRole = UserRole.TEACHER, **overrides) -> User:
        suffix = _unique()
        fields = {
            "first_name": "Test",
            "last_name": role.value.replace("_", " ").title(),
            "email": f"{role.value}-{suffix}@school.example.com",
            "phone": "9876511111",
            "role": role.value,
            "school_id": school.id if school is not None else None,
        }
        fields.update(overrides)
        user = User(**fields)
        db_session.add(user)
        await db_session.flush()
        return user

    return _make


@pytest.fixture()
def make_class(db_session: AsyncSession):
    async def _make(school: School, grade: str = "10", section: str = "A", **overrides) -> SchoolClass:
        fields = {"name": f"Class {grade}-{section}", "grade": grade, "section": section, "school_id": school.id}
        fields.update(overrides)
        school_class = SchoolClass(**fields)
        db_session.add(school_class)
        await db_session.flush()
        return school_class

    return _make


@pytest.fixture()
def make_student(db_session: AsyncSession, make_user):
    async def _make(school_class: SchoolClass, roll_number: str, **overrides) -> Student:
        user = await make_user(await db_session.get(School, school_class.school_id), UserRole.STUDENT)
        fields = {
            "user_id": user.id,
            "class_id": school_class.id,
            "roll_number": roll_number,
            "admission_number": f"ADM-{_unique()}",
        }
        fields.update(overrides)
        student = Student(**fields)
        db_session.add(student)
        await db_session.flush()
        return student

    return _make
