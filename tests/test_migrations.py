import inspect
import uuid
from enum import Enum
from typing import AsyncGenerator

import pytest
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine

from shikshan.core.enums import StudentFeeStatus, UserRole, check_in
from shikshan.core.exceptions import MigrationError
from shikshan.core.id_service import next_custom_id, year_code
from shikshan.core.models import School
from shikshan.db.migrations import runner
from shikshan.db.migrations.ops import create_index_if_missing
from shikshan.db.migrations.runner import (
    discover_migrations,
    get_migration_status,
    migrate,
    rollback,
    run_operations,
)
from shikshan.db.schema_check import REQUIRED_TABLES, describe_table, find_missing_tables, list_tables
from shikshan.db.session import create_engine, create_session_factory

ALL_MIGRATIONS = [m.name for m in discover_migrations()]
BEFORE_CUSTOM_IDS = "20241001000019_remove_complaint_attachments"


@pytest.fixture()
async def file_engine(tmp_path, settings) -> AsyncGenerator[AsyncEngine, None]:
    """Empty on-disk SQLite database; migrations create every table."""
    db_engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'migrations.db'}", settings=settings)
    yield db_engine
    await db_engine.dispose()


def test_migrations_are_discovered_in_file_name_order() -> None:
    assert ALL_MIGRATIONS == sorted(ALL_MIGRATIONS)
    assert ALL_MIGRATIONS[0] == "20241001000001_create_schools"
    assert ALL_MIGRATIONS[-1] == "20251011011054_add_row_level_security"
    assert len(ALL_MIGRATIONS) == 23


async def test_migrate_creates_every_required_table(file_engine: AsyncEngine) -> None:
    applied = await migrate(file_engine)

    assert applied == ALL_MIGRATIONS
    assert await find_missing_tables(file_engine) == []
    status = await get_migration_status(file_engine)
    assert status["applied"] == ALL_MIGRATIONS
    assert status["pending"] == []
    assert status["up_to_date"] is True
    assert await migrate(file_engine) == []


async def test_migrated_schema_has_custom_id_indexes(file_engine: AsyncEngine) -> None:
    await migrate(file_engine)

    for table in ("schools", "users", "students", "classes"):
        indexes = {ix["name"]: ix for ix in (await describe_table(file_engine, table))["indexes"]}
        assert indexes[f"ix_{table}_custom_id"]["unique"]

    foreign_keys = (await describe_table(file_engine, "schools"))["foreign_keys"]
    assert [fk["referred_table"] for fk in foreign_keys] == ["subscriptions"]
    columns = {c["name"] for c in (await describe_table(file_engine, "complaints"))["columns"]}
    assert "attachments" not in columns


async def test_migrate_stops_at_target(file_engine: AsyncEngine) -> None:
    applied = await migrate(file_engine, target="20241001000003_create_classes")

    assert applied == ALL_MIGRATIONS[:3]
    status = await get_migration_status(file_engine)
    assert status["pending"] == ALL_MIGRATIONS[3:]
    assert status["up_to_date"] is False


async def test_migrate_unknown_target_fails(file_engine: AsyncEngine) -> None:
    with pytest.raises(MigrationError):
        await migrate(file_engine, target="20990101000000_nope")


async def test_rollback_steps_and_to(file_engine: AsyncEngine) -> None:
    await migrate(file_engine)

    reverted = await rollback(file_engine, steps=2)
    assert reverted == [ALL_MIGRATIONS[-1], ALL_MIGRATIONS[-2]]
    assert "subjects" not in await list_tables(file_engine)

    reverted = await rollback(file_engine, to=BEFORE_CUSTOM_IDS)
    assert reverted == ["20241015000001_create_inquiries", "20241008000001_add_custom_ids"]
    columns = {c["name"] for c in (await describe_table(file_engine, "users"))["columns"]}
    assert "custom_id" not in columns

    assert await migrate(file_engine) == ALL_MIGRATIONS[-4:]
    assert (await get_migration_status(file_engine))["up_to_date"] is True


async def test_full_rollback_leaves_only_bookkeeping(file_engine: AsyncEngine) -> None:
    await migrate(file_engine)

    reverted = await rollback(file_engine, steps=len(ALL_MIGRATIONS))

    assert reverted == list(reversed(ALL_MIGRATIONS))
    assert await list_tables(file_engine) == [runner.version_table.name]


async def test_rollback_rejects_bad_arguments(file_engine: AsyncEngine) -> None:
    await migrate(file_engine, target="20241001000002_create_users")

    with pytest.raises(ValueError):
        await rollback(file_engine, steps=0)
    with pytest.raises(MigrationError):
        await rollback(file_engine, to="20241001000005_create_attendance")


async def test_index_step_is_idempotent(file_engine: AsyncEngine) -> None:
    await migrate(file_engine)
    subscriptions = next(m for m in discover_migrations() if m.name.endswith("_create_subscriptions"))
    module = runner._load_module(subscriptions)
    results = []

    # Every index already exists; the step must run again without error.
    await run_operations(file_engine, module.create_indexes)
    await run_operations(
        file_engine,
        lambda: results.append(create_index_if_missing("ix_subscriptions_plan_type", "subscriptions", ["plan_type"])),
    )
    await run_operations(
        file_engine,
        lambda: results.append(create_index_if_missing("ix_subscriptions_currency", "subscriptions", ["currency"])),
    )

    assert results == [False, True]


async def test_index_helper_reraises_other_errors(file_engine: AsyncEngine) -> None:
    with pytest.raises(DBAPIError):
        await run_operations(file_engine, lambda: create_index_if_missing("ix_missing_col", "no_such_table", ["x"]))


async def test_custom_id_backfill_preserves_existing_identifiers(file_engine: AsyncEngine) -> None:
    await migrate(file_engine, target=BEFORE_CUSTOM_IDS)
    keys = ("school_a", "school_b", "admin", "teacher", "teacher2", "pupil", "pupil2", "cls")
    ids = {key: str(uuid.uuid4()) for key in keys}

    async with file_engine.begin() as conn:
        await conn.execute(
            text(
                "INSERT INTO schools (id, name, email, created_at, updated_at) VALUES "
                "(:b, 'Second School', 'b@school.example.com', '2024-02-01 00:00:00', '2024-02-01 00:00:00'), "
                "(:a, 'First School', 'a@school.example.com', '2024-01-01 00:00:00', '2024-01-01 00:00:00')"
            ),
            {"a": ids["school_a"], "b": ids["school_b"]},
        )
        users = [
            ("admin", "school_admin", None, "2024-01-02 00:00:00"),
            ("teacher", "teacher", "T-9", "2024-01-03 00:00:00"),
            ("teacher2", "teacher", None, "2024-01-04 00:00:00"),
            ("pupil", "student", None, "2024-01-05 00:00:00"),
            ("pupil2", "student", None, "2024-01-06 00:00:00"),
        ]
        for key, role, employee_id, created_at in users:
            await conn.execute(
                text(
                    "INSERT INTO users (id, first_name, last_name, phone, role, school_id, employee_id, "
                    "created_at, updated_at) VALUES (:id, 'Test', 'User', '9876500000', :role, :school, "
                    ":employee_id, :created_at, :created_at)"
                ),
                {
                    "id": ids[key],
                    "role": role,
                    "school": ids["school_a"],
                    "employee_id": employee_id,
                    "created_at": created_at,
                },
            )
        await conn.execute(
            text(
                "INSERT INTO classes (id, name, grade, section, school_id) "
                "VALUES (:id, 'Class 1-A', '1', 'A', :school)"
            ),
            {"id": ids["cls"], "school": ids["school_a"]},
        )
        for key, roll, admission, created_at in (
            ("pupil", "01", "GW2024001", "2024-01-05 00:00:00"),
            ("pupil2", "02", "", "2024-01-06 00:00:00"),
        ):
            await conn.execute(
                text(
                    "INSERT INTO students (id, user_id, class_id, roll_number, admission_number, created_at, "
                    "updated_at) VALUES (:id, :user, :cls, :roll, :admission, :created_at, :created_at)"
                ),
                {
                    "id": str(uuid.uuid4()),
                    "user": ids[key],
                    "cls": ids["cls"],
                    "roll": roll,
                    "admission": admission,
                    "created_at": created_at,
                },
            )

    await migrate(file_engine)
    yy = year_code()

    async with file_engine.connect() as conn:
        schools = dict((await conn.execute(text("SELECT id, custom_id FROM schools"))).all())
        users = {
            row.id: (row.custom_id, row.employee_id)
            for row in await conn.execute(text("SELECT id, custom_id, employee_id FROM users"))
        }
        admissions = sorted((await conn.execute(text("SELECT admission_number FROM students"))).scalars())
        class_ids = (await conn.execute(text("SELECT custom_id FROM classes"))).scalars().all()

    assert schools == {ids["school_a"]: f"sch{yy}00001", ids["school_b"]: f"sch{yy}00002"}
    assert users[ids["admin"]] == (f"usr{yy}00001", f"EMP{yy}001")
    assert users[ids["teacher"]] == (f"usr{yy}00002", "T-9")
    assert users[ids["teacher2"]] == (f"usr{yy}00003", f"EMP{yy}003")
    assert users[ids["pupil"]] == (f"usr{yy}00004", None)
    assert admissions == [f"ADM{yy}002", "GW2024001"]
    assert class_ids == [f"cls{yy}00001"]

    async with create_session_factory(file_engine)() as db:
        assert await next_custom_id(db, School) == f"sch{yy}00003"


async def test_failing_migration_is_rolled_back(tmp_path, file_engine: AsyncEngine) -> None:
    versions = tmp_path / "versions"
    versions.mkdir()
    (versions / "20990101000001_create_widgets.py").write_text(
        "import sqlalchemy as sa\n"
        "from alembic import op\n\n\n"
        "def upgrade():\n"
        "    op.create_table('widgets', sa.Column('id', sa.Integer(), primary_key=True))\n\n\n"
        "def downgrade():\n"
        "    op.drop_table('widgets')\n"
    )
    (versions / "20990101000002_broken_gadgets.py").write_text(
        "import sqlalchemy as sa\n"
        "from alembic import op\n\n\n"
        "def upgrade():\n"
        "    op.create_table('gadgets', sa.Column('id', sa.Integer(), primary_key=True))\n"
        "    raise RuntimeError('boom')\n\n\n"
        "def downgrade():\n"
        "    op.drop_table('gadgets')\n"
    )
    (versions / "README.txt").write_text("not a migration")

    with pytest.raises(MigrationError) as exc_info:
        await migrate(file_engine, migrations_path=versions)

    assert exc_info.value.migration == "20990101000002_broken_gadgets"
    tables = await list_tables(file_engine)
    assert "widgets" in tables
    assert "gadgets" not in tables
    status = await get_migration_status(file_engine, migrations_path=versions)
    assert status["applied"] == ["20990101000001_create_widgets"]
    assert status["pending"] == ["20990101000002_broken_gadgets"]


def test_required_tables_cover_all_models() -> None:
    from shikshan.db.session import Base

    assert set(Base.metadata.tables) <= set(REQUIRED_TABLES)


@pytest.mark.parametrize("migration", discover_migrations(), ids=lambda m: m.name)
def test_migration_does_not_depend_on_live_enums(migration) -> None:
    module = runner._load_module(migration)
    enum_names = [
        name for name, value in vars(module).items() if inspect.isclass(value) and issubclass(value, Enum)
    ]
    assert enum_names == []


def test_check_in_accepts_enum_or_literal_values() -> None:
    assert check_in("status", StudentFeeStatus) == "status IN ('pending', 'partial', 'paid', 'overdue')"
    assert check_in("role", ("teacher", "parent")) == "role IN ('teacher', 'parent')"
    assert check_in("role", UserRole) == check_in("role", [role.value for role in UserRole])


async def test_status_on_fresh_database_is_read_only(file_engine: AsyncEngine) -> None:
    status = await get_migration_status(file_engine)

    assert status["applied"] == []
    assert status["pending"] == ALL_MIGRATIONS
    assert "schema_migrations" not in await list_tables(file_engine)
