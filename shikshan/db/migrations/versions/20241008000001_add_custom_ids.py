"""
Add human-readable custom ids (sch2500001, usr2500001, ...) to schools, users,
students and classes, and backfill existing rows in creation order.

Staff users without an employee id get EMP<yy><NNN>; students with a blank
admission number get ADM<yy><NNN>.
"""
import logging

import sqlalchemy as sa
from alembic import op

from shikshan.core.id_service import format_admission_number, format_custom_id, format_employee_id, year_code

logger = logging.getLogger(__name__)

TABLES = ("schools", "users", "students", "classes")
STAFF_ROLES = ("school_admin", "principal", "teacher", "finance_officer", "support_staff")


def _backfill_custom_ids(bind, year):
    for table in TABLES:
        rows = bind.execute(sa.text(f"SELECT id FROM {table} ORDER BY created_at, id")).fetchall()
        for serial, (row_id,) in enumerate(rows, start=1):
            bind.execute(
                sa.text(f"UPDATE {table} SET custom_id = :custom_id WHERE id = :id"),
                {"custom_id": format_custom_id(table, serial, year), "id": row_id},
            )
        logger.info("Backfilled %d custom ids in %s", len(rows), table)


def _backfill_employee_ids(bind, year):
    roles = ", ".join(f"'{role}'" for role in STAFF_ROLES)
    rows = bind.execute(
        sa.text(f"SELECT id, employee_id FROM users WHERE role IN ({roles}) ORDER BY created_at, id")
    ).fetchall()
    for serial, (row_id, employee_id) in enumerate(rows, start=1):
        if employee_id:
            continue
        bind.execute(
            sa.text("UPDATE users SET employee_id = :employee_id WHERE id = :id"),
            {"employee_id": format_employee_id(serial, year), "id": row_id},
        )


def _backfill_admission_numbers(bind, year):
    rows = bind.execute(sa.text("SELECT id, admission_number FROM students ORDER BY created_at, id")).fetchall()
    for serial, (row_id, admission_number) in enumerate(rows, start=1):
        if admission_number and admission_number.strip():
            continue
        bind.execute(
            sa.text("UPDATE students SET admission_number = :admission_number WHERE id = :id"),
            {"admission_number": format_admission_number(serial, year), "id": row_id},
        )


def upgrade():
    for table in TABLES:
        op.add_column(table, sa.Column("custom_id", sa.String(20), nullable=True))

    bind = op.get_bind()
    year = year_code()
    _backfill_custom_ids(bind, year)
    _backfill_employee_ids(bind, year)
    _backfill_admission_numbers(bind, year)

    for table in TABLES:
        op.create_index(f"ix_{table}_custom_id", table, ["custom_id"], unique=True)


def downgrade():
    for table in reversed(TABLES):
        op.drop_index(f"ix_{table}_custom_id", table_name=table)
        op.drop_column(table, "custom_id")
