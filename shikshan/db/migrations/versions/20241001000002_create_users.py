"""Create users table. super_admin is the only role without a school."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import timestamps
from shikshan.db.types import GUID, JSONType, UTCDateTime


GENDERS = ("male", "female", "other")
ROLES = ("super_admin", "school_admin", "principal", "teacher", "student", "parent", "finance_officer", "support_staff")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("phone", sa.String(15), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=True),
        sa.Column("role", sa.String(30), nullable=False),
        sa.Column("profile_pic", sa.String(500), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(10), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("emergency_contact", JSONType(), nullable=True),
        sa.Column("school_id", GUID(), sa.ForeignKey("schools.id", ondelete="CASCADE"), nullable=True),
        sa.Column("employee_id", sa.String(50), nullable=True),
        sa.Column("joining_date", sa.Date(), nullable=True),
        sa.Column("subjects", JSONType(), nullable=True),
        sa.Column("permissions", JSONType(), nullable=True),
        sa.Column("last_login_at", UTCDateTime(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("phone_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("two_factor_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        *timestamps(),
        sa.CheckConstraint(check_in("role", ROLES), name="ck_users_role"),
        sa.CheckConstraint("gender IS NULL OR " + check_in("gender", GENDERS), name="ck_users_gender"),
        sa.CheckConstraint(
            "(role = 'super_admin' AND school_id IS NULL) OR (role <> 'super_admin' AND school_id IS NOT NULL)",
            name="ck_users_school_scope",
        ),
    )
    op.create_index("ix_users_phone", "users", ["phone"])
    op.create_index("ix_users_school_id", "users", ["school_id"])
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_is_active", "users", ["is_active"])


def downgrade():
    op.drop_table("users")
