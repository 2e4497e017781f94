"""Helpers shared by the migration modules. Must be called inside an alembic operations context."""
import logging
from typing import List, Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.exc import DBAPIError

from shikshan.db.types import UTCDateTime

logger = logging.getLogger(__name__)

DUPLICATE_OBJECT_SQLSTATE = "42P07"


def is_postgresql() -> bool:
    return op.get_bind().dialect.name == "postgresql"


def timestamps() -> List[sa.Column]:
    return [
        sa.Column("created_at", UTCDateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", UTCDateTime(), nullable=False, server_default=sa.func.now()),
    ]


def _already_exists(exc: DBAPIError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == DUPLICATE_OBJECT_SQLSTATE:
        return True
    return "already exists" in str(orig).lower()


def create_index_if_missing(name: str, table: str, columns: Sequence[str], **kw) -> bool:
    """
    Create an index, treating "already exists" as success.

    Returns True when the index was created. Any other database error is
    re-raised. On PostgreSQL the attempt runs in a SAVEPOINT so a duplicate
    does not abort the surrounding migration transaction.
    """
    bind = op.get_bind()
    savepoint = bind.begin_nested() if bind.dialect.name == "postgresql" else None
    try:
        op.create_index(name, table, list(columns), **kw)
    except DBAPIError as exc:
        if savepoint is not None:
            savepoint.rollback()
        if not _already_exists(exc):
            raise
        logger.info("Index %s already exists on %s, skipping", name, table)
        return False
    if savepoint is not None:
        savepoint.commit()
    return True
