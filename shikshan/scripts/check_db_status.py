"""
Show migration status, apply anything pending, then show the final status.

Usage: python -m shikshan.scripts.check_db_status
"""
import asyncio
import sys
from typing import List

from sqlalchemy.ext.asyncio import AsyncEngine

from shikshan.core.exceptions import MigrationError
from shikshan.core.logging import configure_logging
from shikshan.db.migrations.runner import get_migration_status, migrate
from shikshan.db.session import create_engine
from shikshan.scripts.migrate import print_status


async def check_and_migrate(engine: AsyncEngine) -> List[str]:
    """Print status before and after applying pending migrations. Returns the applied names."""
    print("=== Migration Status ===")
    print_status(await get_migration_status(engine))

    print("\n=== Running pending migrations ===")
    applied = await migrate(engine)
    print(f"Applied {len(applied)} migration(s).")

    print("\n=== Final Migration Status ===")
    print_status(await get_migration_status(engine))
    return applied


async def main() -> int:
    engine = create_engine()
    try:
        await check_and_migrate(engine)
    except MigrationError as e:
        print(f"Error with database migrations: {e.message}")
        return 1
    finally:
        await engine.dispose()
    print("\nDatabase migrations completed.")
    return 0


if __name__ == "__main__":
    configure_logging()
    sys.exit(asyncio.run(main()))
