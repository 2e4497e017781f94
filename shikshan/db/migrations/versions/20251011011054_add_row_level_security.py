"""
Tenant audit log, plus PostgreSQL row-level security.

The audit table is created on every database. On PostgreSQL this also
installs the school-context functions, a school isolation policy and an audit
trigger on each tenant table that has a school_id column. Other databases get
the table only.

A session scopes itself with ``SELECT set_school_context(:school_id, :role)``;
super admins, and sessions without a school context, see every row.
"""
import logging

import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import create_index_if_missing, is_postgresql
from shikshan.db.types import GUID, JSONType, UTCDateTime

logger = logging.getLogger(__name__)

AUDIT_LEVELS = ("info", "warn", "error", "security")

TENANT_TABLES = (
    "users",
    "students",
    "teachers",
    "parents",
    "classes",
    "attendance",
    "homework",
    "events",
    "complaints",
    "fees",
)

AUDIT_INDEXES = ("user_id", "school_id", "created_at", "action", "level")

SET_SCHOOL_CONTEXT = """
CREATE OR REPLACE FUNCTION set_school_context(school_uuid uuid, user_role text DEFAULT NULL)
RETURNS void AS $$
BEGIN
  PERFORM set_config('app.current_school_id', COALESCE(school_uuid::text, ''), true);
  PERFORM set_config('app.user_role', COALESCE(user_role, ''), true);
END;
$$ LANGUAGE plpgsql SECURITY DEFINER;
"""

GET_CURRENT_SCHOOL_ID = """
CREATE OR REPLACE FUNCTION get_current_school_id()
RETURNS uuid AS $$
BEGIN
  RETURN NULLIF(current_setting('app.current_school_id', true), '')::uuid;
END;
$$ LANGUAGE plpgsql SECURITY DEFINER;
"""

IS_SUPER_ADMIN = """
CREATE OR REPLACE FUNCTION is_super_admin()
RETURNS boolean AS $$
BEGIN
  RETURN COALESCE(current_setting('app.user_role', true), '') = 'super_admin';
END;
$$ LANGUAGE plpgsql SECURITY DEFINER;
"""

# password_hash never reaches the audit trail.
AUDIT_TENANT_ACCESS = """
CREATE OR REPLACE FUNCTION audit_tenant_access()
RETURNS trigger AS $$
DECLARE
  acting_user_id uuid;
  acting_school_id uuid;
BEGIN
  BEGIN
    acting_user_id := NULLIF(current_setting('app.current_user_id', true), '')::uuid;
  EXCEPTION WHEN OTHERS THEN
    acting_user_id := NULL;
  END;
  acting_school_id := get_current_school_id();

  IF TG_OP = 'DELETE' THEN
    INSERT INTO tenant_audit_logs (user_id, school_id, action, table_name, record_id, old_values, created_at)
    VALUES (acting_user_id, acting_school_id, 'DELETE', TG_TABLE_NAME, OLD.id,
            to_jsonb(OLD) - 'password_hash', NOW());
    RETURN OLD;
  ELSIF TG_OP = 'UPDATE' THEN
    INSERT INTO tenant_audit_logs (user_id, school_id, action, table_name, record_id, old_values, new_values, created_at)
    VALUES (acting_user_id, acting_school_id, 'UPDATE', TG_TABLE_NAME, NEW.id,
            to_jsonb(OLD) - 'password_hash', to_jsonb(NEW) - 'password_hash', NOW());
    RETURN NEW;
  ELSIF TG_OP = 'INSERT' THEN
    INSERT INTO tenant_audit_logs (user_id, school_id, action, table_name, record_id, new_values, created_at)
    VALUES (acting_user_id, acting_school_id, 'INSERT', TG_TABLE_NAME, NEW.id,
            to_jsonb(NEW) - 'password_hash', NOW());
    RETURN NEW;
  END IF;
  RETURN NULL;
END;
$$ LANGUAGE plpgsql SECURITY DEFINER;
"""


def _school_scoped_tables(bind):
    inspector = sa.inspect(bind)
    existing = set(inspector.get_table_names())
    for table in TENANT_TABLES:
        if table not in existing:
            logger.warning("Table %s does not exist, skipping row-level security", table)
            continue
        if "school_id" not in {column["name"] for column in inspector.get_columns(table)}:
            logger.info("Table %s has no school_id column, skipping row-level security", table)
            continue
        yield table


def _create_audit_table(postgresql):
    op.create_table(
        "tenant_audit_logs",
        sa.Column(
            "id",
            GUID(),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()") if postgresql else None,
        ),
        sa.Column("user_id", GUID(), nullable=True),
        sa.Column("school_id", GUID(), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("table_name", sa.String(100), nullable=True),
        sa.Column("record_id", GUID(), nullable=True),
        sa.Column("old_values", JSONType(), nullable=True),
        sa.Column("new_values", JSONType(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("level", sa.String(10), nullable=False, server_default="info"),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("metadata", JSONType(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(check_in("level", AUDIT_LEVELS), name="ck_tenant_audit_logs_level"),
    )
    for column in AUDIT_INDEXES:
        create_index_if_missing(f"tenant_audit_logs_{column}", "tenant_audit_logs", [column])


def upgrade():
    postgresql = is_postgresql()
    _create_audit_table(postgresql)
    if not postgresql:
        return

    for ddl in (SET_SCHOOL_CONTEXT, GET_CURRENT_SCHOOL_ID, IS_SUPER_ADMIN, AUDIT_TENANT_ACCESS):
        op.execute(sa.text(ddl))

    enabled = 0
    for table in _school_scoped_tables(op.get_bind()):
        op.execute(sa.text(f'ALTER TABLE "{table}" ENABLE ROW LEVEL SECURITY'))
        op.execute(
            sa.text(
                f'CREATE POLICY {table}_school_isolation ON "{table}" FOR ALL TO PUBLIC '
                "USING (is_super_admin() OR school_id = get_current_school_id() OR get_current_school_id() IS NULL)"
            )
        )
        op.execute(
            sa.text(
                f'CREATE TRIGGER {table}_audit_trigger AFTER INSERT OR UPDATE OR DELETE ON "{table}" '
                "FOR EACH ROW EXECUTE FUNCTION audit_tenant_access()"
            )
        )
        enabled += 1
    logger.info("Row-level security enabled on %d tables", enabled)


def downgrade():
    if is_postgresql():
        for table in TENANT_TABLES:
            op.execute(sa.text(f'DROP TRIGGER IF EXISTS {table}_audit_trigger ON "{table}"'))
            op.execute(sa.text(f'DROP POLICY IF EXISTS {table}_school_isolation ON "{table}"'))
            op.execute(sa.text(f'ALTER TABLE "{table}" DISABLE ROW LEVEL SECURITY'))
        op.execute(sa.text("DROP FUNCTION IF EXISTS audit_tenant_access()"))
        op.execute(sa.text("DROP FUNCTION IF EXISTS is_super_admin()"))
        op.execute(sa.text("DROP FUNCTION IF EXISTS get_current_school_id()"))
        op.execute(sa.text("DROP FUNCTION IF EXISTS set_school_context(uuid, text)"))
    op.drop_table("tenant_audit_logs")
