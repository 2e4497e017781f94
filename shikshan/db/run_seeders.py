"""
Run every seeder in order: default subscriptions, super admin, demo data.

Usage:
  python -m shikshan.db.run_seeders
  python -m shikshan.db.run_seeders --skip-demo
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from shikshan.core.config import Settings
from shikshan.core.exceptions import ConfigurationError
from shikshan.core.logging import configure_logging
from shikshan.db.seed_demo_data import seed_demo_data
from shikshan.db.seed_subscriptions import seed_subscriptions
from shikshan.db.seed_super_admin import seed_super_admin
from shikshan.db.session import create_engine, create_session_factory

logger = logging.getLogger(__name__)


async def run_seeders(engine: AsyncEngine, include_demo: bool = True, settings: Optional[Settings] = None) -> None:
    """Each seeder gets its own session and transaction; the first failure stops the run."""
    session_factory = create_session_factory(engine)
    seeders = [
        ("subscriptions", lambda db: seed_subscriptions(db)),
        ("super admin", lambda db: seed_super_admin(db, settings)),
    ]
    if include_demo:
        seeders.append(("demo data", lambda db: seed_demo_data(db, settings)))

    for name, seeder in seeders:
        logger.info("Running seeder: %s", name)
        async with session_factory() as db:
            try:
                await seeder(db)
            except Exception:
                await db.rollback()
                logger.error("Seeder %s failed", name)
                raise


async def main(include_demo: bool) -> int:
    engine = create_engine()
    try:
        await run_seeders(engine, include_demo=include_demo)
    except ConfigurationError as e:
        print("Configuration error:", e.message)
        return 1
    finally:
        await engine.dispose()
    print("All seeders completed.")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run all database seeders")
    parser.add_argument("--skip-demo", action="store_true", help="Do not create the demo school")
    args = parser.parse_args()
    configure_logging()
    sys.exit(asyncio.run(main(include_demo=not args.skip_demo)))
