"""Create complaints table."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import timestamps
from shikshan.db.types import GUID, JSONType, UTCDateTime


CATEGORIES = ("academic", "discipline", "infrastructure", "transport", "fee", "other")
COMPLAINT_STATUSES = ("open", "in_progress", "resolved", "closed", "rejected")
PRIORITIES = ("low", "medium", "high", "urgent")


def upgrade():
    op.create_table(
        "complaints",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("priority", sa.String(10), nullable=False, server_default="medium"),
        sa.Column("status", sa.String(20), nullable=False, server_default="open"),
        sa.Column("school_id", GUID(), sa.ForeignKey("schools.id", ondelete="CASCADE"), nullable=False),
        sa.Column("raised_by", GUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("assigned_to", GUID(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("student_id", GUID(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("sla_deadline", UTCDateTime(), nullable=True),
        sa.Column("resolved_at", UTCDateTime(), nullable=True),
        sa.Column("resolution", sa.Text(), nullable=True),
        sa.Column("feedback", JSONType(), nullable=True),
        # Dropped again by 20241001000019.
        sa.Column("attachments", JSONType(), nullable=True),
        *timestamps(),
        sa.CheckConstraint(check_in("category", CATEGORIES), name="ck_complaints_category"),
        sa.CheckConstraint(check_in("priority", PRIORITIES), name="ck_complaints_priority"),
        sa.CheckConstraint(check_in("status", COMPLAINT_STATUSES), name="ck_complaints_status"),
        sa.CheckConstraint(
            "(status = 'resolved' AND resolved_at IS NOT NULL) OR (status <> 'resolved' AND resolved_at IS NULL)",
            name="ck_complaints_resolved_at",
        ),
    )
    op.create_index("ix_complaints_school_id", "complaints", ["school_id"])
    op.create_index("ix_complaints_raised_by", "complaints", ["raised_by"])
    op.create_index("ix_complaints_assigned_to", "complaints", ["assigned_to"])
    op.create_index("ix_complaints_status", "complaints", ["status"])
    op.create_index("ix_complaints_priority", "complaints", ["priority"])
    op.create_index("ix_complaints_category", "complaints", ["category"])


def downgrade():
    op.drop_table("complaints")
