"""Create fees table."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import timestamps
from shikshan.db.types import GUID, UTCDateTime


FEE_STATUSES = ("active", "inactive")


def upgrade():
    op.create_table(
        "fees",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("due_date", UTCDateTime(), nullable=False),
        sa.Column("class_id", GUID(), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("school_id", GUID(), sa.ForeignKey("schools.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_by", GUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        *timestamps(),
        sa.CheckConstraint(check_in("status", FEE_STATUSES), name="ck_fees_status"),
        sa.CheckConstraint("amount >= 0", name="ck_fees_amount_non_negative"),
    )
    op.create_index("ix_fees_class_id", "fees", ["class_id"])
    op.create_index("ix_fees_school_id", "fees", ["school_id"])
    op.create_index("ix_fees_due_date", "fees", ["due_date"])


def downgrade():
    op.drop_table("fees")
