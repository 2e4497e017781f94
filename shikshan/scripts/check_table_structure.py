"""
Print the reflected structure of one table and the applied migrations.

Usage:
  python -m shikshan.scripts.check_table_structure
  python -m shikshan.scripts.check_table_structure complaints
"""
import argparse
import asyncio
import sys

from sqlalchemy.ext.asyncio import AsyncEngine

from shikshan.core.logging import configure_logging
from shikshan.db.migrations.runner import get_applied_migrations
from shikshan.db.schema_check import describe_table, list_tables
from shikshan.db.session import create_engine


async def report_table(engine: AsyncEngine, table: str) -> bool:
    """Print the table's structure. Returns False when the table does not exist."""
    if table not in await list_tables(engine):
        print(f"Table {table} does not exist.")
        return False
    structure = await describe_table(engine, table)
    applied = await get_applied_migrations(engine)

    print(f"=== {table} columns ===")
    for column in structure["columns"]:
        nullable = "NULL" if column["nullable"] else "NOT NULL"
        default = f" DEFAULT {column['default']}" if column.get("default") is not None else ""
        print(f"  {column['name']}: {column['type']} {nullable}{default}")

    print(f"\n=== {table} indexes ===")
    for index in structure["indexes"]:
        unique = "UNIQUE " if index.get("unique") else ""
        print(f"  {unique}{index['name']} ({', '.join(c for c in index['column_names'] if c)})")
    for constraint in structure["unique_constraints"]:
        print(f"  UNIQUE {constraint['name']} ({', '.join(constraint['column_names'])})")

    print(f"\n=== {table} foreign keys ===")
    for fk in structure["foreign_keys"]:
        ondelete = (fk.get("options") or {}).get("ondelete", "NO ACTION")
        print(
            f"  ({', '.join(fk['constrained_columns'])}) -> "
            f"{fk['referred_table']}({', '.join(fk['referred_columns'])}) ON DELETE {ondelete}"
        )

    print("\n=== Applied migrations ===")
    for name in sorted(applied):
        print(f"  {name}")
    return True


async def main(table: str) -> int:
    engine = create_engine()
    try:
        found = await report_table(engine, table)
    finally:
        await engine.dispose()
    return 0 if found else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Describe a database table")
    parser.add_argument("table", nargs="?", default="student_parents")
    args = parser.parse_args()
    configure_logging()
    sys.exit(asyncio.run(main(args.table)))
