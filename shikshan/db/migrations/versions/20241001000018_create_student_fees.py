"""Create student_fees table (one row per student per fee)."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import timestamps
from shikshan.db.types import GUID, UTCDateTime


STUDENT_FEE_STATUSES = ("pending", "partial", "paid", "overdue")


def upgrade():
    op.create_table(
        "student_fees",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("fee_id", GUID(), sa.ForeignKey("fees.id", ondelete="CASCADE"), nullable=False),
        sa.Column("student_id", GUID(), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("paid_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("paid_date", UTCDateTime(), nullable=True),
        sa.Column("payment_method", sa.String(50), nullable=True),
        sa.Column("transaction_id", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *timestamps(),
        sa.UniqueConstraint("fee_id", "student_id", name="unique_fee_student"),
        sa.CheckConstraint(check_in("status", STUDENT_FEE_STATUSES), name="ck_student_fees_status"),
        sa.CheckConstraint("amount >= 0 AND paid_amount >= 0", name="ck_student_fees_amounts_non_negative"),
        sa.CheckConstraint(
            "(status = 'paid' AND paid_amount >= amount) OR (status <> 'paid' AND paid_amount < amount)",
            name="ck_student_fees_status_matches_paid",
        ),
    )
    op.create_index("ix_student_fees_student_id", "student_fees", ["student_id"])
    op.create_index("ix_student_fees_status", "student_fees", ["status"])


def downgrade():
    op.drop_table("student_fees")
