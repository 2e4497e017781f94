"""Create schools table."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import timestamps
from shikshan.db.types import GUID, JSONType, UTCDateTime


PLAN_TYPES = ("basic", "standard", "premium")
SUBSCRIPTION_STATUSES = ("trial", "active", "suspended", "cancelled")


def upgrade():
    op.create_table(
        "schools",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("phone", sa.String(15), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("logo", sa.String(500), nullable=True),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("established_year", sa.Integer(), nullable=True),
        sa.Column("academic_year", sa.String(20), nullable=False, server_default="2024-25"),
        sa.Column("timezone", sa.String(50), nullable=False, server_default="Asia/Kolkata"),
        sa.Column("locale", sa.String(10), nullable=False, server_default="en"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="INR"),
        sa.Column("subscription_status", sa.String(20), nullable=False, server_default="trial"),
        sa.Column("subscription_plan", sa.String(20), nullable=False, server_default="basic"),
        sa.Column("subscription_expires_at", UTCDateTime(), nullable=True),
        sa.Column("max_students", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("max_teachers", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("settings", JSONType(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *timestamps(),
        sa.CheckConstraint(
            check_in("subscription_status", SUBSCRIPTION_STATUSES), name="ck_schools_subscription_status"
        ),
        sa.CheckConstraint(check_in("subscription_plan", PLAN_TYPES), name="ck_schools_subscription_plan"),
    )
    op.create_index("ix_schools_subscription_status", "schools", ["subscription_status"])
    op.create_index("ix_schools_is_active", "schools", ["is_active"])


def downgrade():
    op.drop_table("schools")
