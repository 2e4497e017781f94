"""
Migration runner.

Migrations are plain modules in ``versions/`` named ``YYYYMMDDNNNNNN_name.py``
and ordered by file name. Each defines ``upgrade()`` and ``downgrade()`` using
``alembic.op``. Applied migrations are recorded one row per file in
``schema_migrations``.

Example:
    engine = create_engine()
    applied = await migrate(engine)
    status = await get_migration_status(engine)
"""
import importlib.util
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Callable, Dict, List, Optional, Union

from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from sqlalchemy import Column, MetaData, String, Table, delete, insert, inspect, select
from sqlalchemy.ext.asyncio import AsyncEngine

from shikshan.core.exceptions import MigrationError
from shikshan.db.types import UTCDateTime, utcnow

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "versions"
MIGRATION_FILE_RE = re.compile(r"^\d{14}_[a-z0-9_]+\.py$")

version_table = Table(
    "schema_migrations",
    MetaData(),
    Column("name", String(255), primary_key=True),
    Column("applied_at", UTCDateTime(), nullable=False),
)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class Migration:
    name: str
    path: Path


def discover_migrations(migrations_path: Optional[PathLike] = None) -> List[Migration]:
    """All migration files in lexical (= chronological) order."""
    directory = Path(migrations_path) if migrations_path else MIGRATIONS_DIR
    return [
        Migration(name=path.stem, path=path)
        for path in sorted(directory.iterdir())
        if MIGRATION_FILE_RE.match(path.name)
    ]


def _load_module(migration: Migration) -> ModuleType:
    # File names start with digits, so they cannot be imported by dotted name.
    spec = importlib.util.spec_from_file_location(f"shikshan_migration_{migration.name}", migration.path)
    if spec is None or spec.loader is None:
        raise MigrationError(f"Cannot load migration {migration.name}", migration.name)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _run_operations_sync(connection, fn: Callable[[], None]) -> None:
    """Run fn with alembic's ``op`` bound to this connection."""
    context = MigrationContext.configure(connection)
    with Operations.context(context):
        fn()


async def run_operations(engine: AsyncEngine, fn: Callable[[], None]) -> None:
    """Run a function that uses ``alembic.op`` in its own transaction."""
    async with engine.begin() as conn:
        await conn.run_sync(_run_operations_sync, fn)


async def ensure_version_table(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(version_table.create, checkfirst=True)


async def get_applied_migrations(engine: AsyncEngine) -> List[str]:
    """Applied migration names. Read-only: an untouched database has none."""
    async with engine.connect() as conn:
        if not await conn.run_sync(lambda sync_conn: inspect(sync_conn).has_table(version_table.name)):
            return []
        result = await conn.execute(select(version_table.c.name).order_by(version_table.c.name))
        return list(result.scalars().all())


async def get_migration_status(engine: AsyncEngine, migrations_path: Optional[PathLike] = None) -> Dict:
    """Applied and pending migration names.

    Returns:
        Dict with applied, pending, total and up_to_date keys.
    """
    applied = await get_applied_migrations(engine)
    applied_set = set(applied)
    known = discover_migrations(migrations_path)
    pending = [m.name for m in known if m.name not in applied_set]
    return {
        "applied": applied,
        "pending": pending,
        "total": len(known),
        "up_to_date": not pending,
    }


async def _apply(engine: AsyncEngine, migration: Migration, direction: str) -> None:
    module = _load_module(migration)
    fn = getattr(module, direction, None)
    if fn is None:
        raise MigrationError(f"Migration {migration.name} has no {direction}() function", migration.name)

    try:
        async with engine.begin() as conn:
            await conn.run_sync(_run_operations_sync, fn)
            if direction == "upgrade":
                await conn.execute(insert(version_table).values(name=migration.name, applied_at=utcnow()))
            else:
                await conn.execute(delete(version_table).where(version_table.c.name == migration.name))
    except MigrationError:
        raise
    except Exception as exc:
        logger.error("Migration %s (%s) failed: %s", migration.name, direction, exc)
        raise MigrationError(f"Migration {migration.name} failed: {exc}", migration.name) from exc


async def migrate(
    engine: AsyncEngine,
    target: Optional[str] = None,
    migrations_path: Optional[PathLike] = None,
) -> List[str]:
    """
    Apply pending migrations in order, stopping after target when given.

    Each migration runs in its own transaction together with its
    schema_migrations row. The first failure stops the run.

    Returns:
        Names of the migrations applied by this call.
    """
    known = discover_migrations(migrations_path)
    if target is not None and target not in {m.name for m in known}:
        raise MigrationError(f"Unknown migration: {target}", target)

    await ensure_version_table(engine)
    applied_set = set(await get_applied_migrations(engine))
    logger.info("Migrations applied so far: %d of %d", len(applied_set), len(known))

    applied = []
    for migration in known:
        if migration.name not in applied_set:
            await _apply(engine, migration, "upgrade")
            applied.append(migration.name)
            logger.info("Applied migration: %s", migration.name)
        if migration.name == target:
            break

    if not applied:
        logger.info("No pending migrations")
    return applied


async def rollback(
    engine: AsyncEngine,
    steps: int = 1,
    to: Optional[str] = None,
    migrations_path: Optional[PathLike] = None,
) -> List[str]:
    """
    Revert the most recent migrations, newest first.

    With ``to``, reverts everything applied after that migration (which stays
    applied); otherwise reverts ``steps`` migrations.

    Returns:
        Names of the migrations reverted by this call.
    """
    by_name = {m.name: m for m in discover_migrations(migrations_path)}
    applied = await get_applied_migrations(engine)

    if to is not None:
        if to not in applied:
            raise MigrationError(f"Migration {to} is not applied", to)
        to_revert = [name for name in applied if name > to]
    else:
        if steps < 1:
            raise ValueError("steps must be at least 1")
        to_revert = applied[-steps:]

    reverted = []
    for name in reversed(to_revert):
        migration = by_name.get(name)
        if migration is None:
            raise MigrationError(f"Applied migration {name} has no file to roll back with", name)
        await _apply(engine, migration, "downgrade")
        reverted.append(name)
        logger.info("Reverted migration: %s", name)
    return reverted
