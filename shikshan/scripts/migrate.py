"""
Apply, revert or inspect schema migrations.

Usage:
  python -m shikshan.scripts.migrate status
  python -m shikshan.scripts.migrate up [--target 20241017000001_create_subjects]
  python -m shikshan.scripts.migrate down [--steps 2 | --to 20241008000001_add_custom_ids]
"""
import argparse
import asyncio
import sys
from typing import Dict

from sqlalchemy.ext.asyncio import AsyncEngine

from shikshan.core.exceptions import MigrationError
from shikshan.core.logging import configure_logging
from shikshan.db.migrations.runner import get_migration_status, migrate, rollback
from shikshan.db.session import create_engine


def print_status(status: Dict) -> None:
    print(f"Applied: {len(status['applied'])} / {status['total']}")
    for name in status["applied"]:
        print(f"  up    {name}")
    for name in status["pending"]:
        print(f"  down  {name}")
    print("Database is up to date." if status["up_to_date"] else f"{len(status['pending'])} pending migration(s).")


async def run(engine: AsyncEngine, args: argparse.Namespace) -> None:
    if args.command == "status":
        print_status(await get_migration_status(engine))
    elif args.command == "up":
        applied = await migrate(engine, target=args.target)
        print(f"Applied {len(applied)} migration(s).")
        for name in applied:
            print(f"  + {name}")
    else:
        reverted = await rollback(engine, steps=args.steps, to=args.to)
        print(f"Reverted {len(reverted)} migration(s).")
        for name in reverted:
            print(f"  - {name}")


async def main(args: argparse.Namespace) -> int:
    engine = create_engine()
    try:
        await run(engine, args)
    except MigrationError as e:
        print(f"Migration {e.migration} failed: {e.message}")
        return 1
    finally:
        await engine.dispose()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage database schema migrations")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="List applied and pending migrations")
    up = sub.add_parser("up", help="Apply pending migrations")
    up.add_argument("--target", default=None, help="Stop after this migration")
    down = sub.add_parser("down", help="Revert applied migrations")
    group = down.add_mutually_exclusive_group()
    group.add_argument("--steps", type=int, default=1, help="Number of migrations to revert (default 1)")
    group.add_argument("--to", default=None, help="Revert everything applied after this migration")
    return parser


if __name__ == "__main__":
    configure_logging()
    sys.exit(asyncio.run(main(build_parser().parse_args())))
