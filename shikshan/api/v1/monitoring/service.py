import logging
from typing import Dict

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncEngine

from shikshan.auth.models import User
from shikshan.core.models import School
from shikshan.core.schemas import DatabaseHealth, HealthResponse, MigrationStatus
from shikshan.db.diagnostics import describe_connection_error
from shikshan.db.migrations.runner import get_migration_status
from shikshan.db.types import utcnow

logger = logging.getLogger(__name__)


async def _row_counts(engine: AsyncEngine) -> Dict[str, int]:
    async with engine.connect() as conn:
        schools = (await conn.execute(select(func.count()).select_from(School))).scalar_one()
        users = (await conn.execute(select(func.count()).select_from(User))).scalar_one()
    return {"schools": schools, "users": users}


async def get_migrations(engine: AsyncEngine) -> MigrationStatus:
    return MigrationStatus(**await get_migration_status(engine))


async def check_health(engine: AsyncEngine) -> HealthResponse:
    """Database reachability, migration state and headline row counts.

    Degraded when the database cannot be reached or migrations are pending.
    """
    database = DatabaseHealth(connected=False, dialect=engine.dialect.name)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        database.connected = True
    except Exception as e:
        logger.warning("Health check could not reach the database: %s", e)
        database.error = describe_connection_error(e)
        return HealthResponse(status="degraded", timestamp=utcnow(), database=database)

    migrations = await get_migrations(engine)
    counts = await _row_counts(engine) if migrations.up_to_date else {}
    return HealthResponse(
        status="healthy" if migrations.up_to_date else "degraded",
        timestamp=utcnow(),
        database=database,
        migrations=migrations,
        counts=counts,
    )
