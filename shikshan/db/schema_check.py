"""
Verify that the connected database has every table the application needs.

Tables are created by the migrations only; this module reports what is
missing and never creates anything.

Usage:
  python -m shikshan.db.schema_check
"""
import asyncio
import sys
from typing import Dict, List

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine

from shikshan.db.migrations.runner import version_table
from shikshan.db.session import create_engine

REQUIRED_TABLES: List[str] = [
    "schools",
    "users",
    "classes",
    "students",
    "attendance",
    "events",
    "parents",
    "teachers",
    "complaints",
    "student_parents",
    "class_teachers",
    "homework",
    "homework_submissions",
    "subscriptions",
    "payments",
    "staff_attendance",
    "complaint_updates",
    "fees",
    "student_fees",
    "inquiries",
    "subjects",
    "tenant_audit_logs",
    version_table.name,
]


async def list_tables(db_engine: AsyncEngine) -> List[str]:
    async with db_engine.connect() as conn:
        return await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())


async def find_missing_tables(db_engine: AsyncEngine) -> List[str]:
    existing = set(await list_tables(db_engine))
    return [table for table in REQUIRED_TABLES if table not in existing]


async def describe_table(db_engine: AsyncEngine, table: str) -> Dict[str, list]:
    """Columns, indexes, unique constraints and foreign keys of one table, as reflected."""

    def _describe(sync_conn) -> Dict[str, list]:
        inspector = inspect(sync_conn)
        return {
            "columns": inspector.get_columns(table),
            "indexes": inspector.get_indexes(table),
            "unique_constraints": inspector.get_unique_constraints(table),
            "foreign_keys": inspector.get_foreign_keys(table),
        }

    async with db_engine.connect() as conn:
        return await conn.run_sync(_describe)


async def main() -> int:
    db_engine = create_engine()
    try:
        missing = await find_missing_tables(db_engine)
    finally:
        await db_engine.dispose()
    if missing:
        print(f"Missing {len(missing)} table(s): {', '.join(missing)}")
        print("Run: python -m shikshan.scripts.migrate up")
        return 1
    print("All required tables exist in the database.")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
