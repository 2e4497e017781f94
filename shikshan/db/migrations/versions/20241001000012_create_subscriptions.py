"""Create subscriptions table (global plan catalogue)."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import create_index_if_missing, timestamps
from shikshan.db.types import GUID, JSONType

INDEXES = [
    ("ix_subscriptions_plan_type", ["plan_type"]),
    ("ix_subscriptions_is_active", ["is_active"]),
    ("ix_subscriptions_sort_order", ["sort_order"]),
]
BILLING_CYCLES = ("monthly", "quarterly", "yearly")
PLAN_TYPES = ("basic", "standard", "premium")


def create_indexes():
    for name, columns in INDEXES:
        create_index_if_missing(name, "subscriptions", columns)


def upgrade():
    op.create_table(
        "subscriptions",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("plan_type", sa.String(20), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="INR"),
        sa.Column("billing_cycle", sa.String(20), nullable=False, server_default="monthly"),
        sa.Column("trial_days", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("max_students", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("max_teachers", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("max_classes", sa.Integer(), nullable=False, server_default="20"),
        sa.Column("features", JSONType(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_popular", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        *timestamps(),
        sa.CheckConstraint(check_in("plan_type", PLAN_TYPES), name="ck_subscriptions_plan_type"),
        sa.CheckConstraint(check_in("billing_cycle", BILLING_CYCLES), name="ck_subscriptions_billing_cycle"),
        sa.CheckConstraint("price >= 0", name="ck_subscriptions_price_non_negative"),
        sa.CheckConstraint("trial_days >= 0 AND trial_days <= 365", name="ck_subscriptions_trial_days"),
    )
    create_indexes()


def downgrade():
    op.drop_table("subscriptions")
