"""Create attendance table. period NULL marks the whole day."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import timestamps
from shikshan.db.types import GUID, UTCDateTime


ATTENDANCE_STATUSES = ("present", "absent", "late", "half_day", "excused")


def upgrade():
    op.create_table(
        "attendance",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("student_id", GUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("class_id", GUID(), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="present"),
        sa.Column("marked_by", GUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("marked_at", UTCDateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("period", sa.Integer(), nullable=True),
        *timestamps(),
        sa.UniqueConstraint("student_id", "class_id", "date", "period", name="unique_student_class_date_period"),
        sa.CheckConstraint(check_in("status", ATTENDANCE_STATUSES), name="ck_attendance_status"),
        sa.CheckConstraint("period IS NULL OR (period >= 1 AND period <= 10)", name="ck_attendance_period"),
    )
    op.create_index(
        "unique_student_class_date_daily",
        "attendance",
        ["student_id", "class_id", "date"],
        unique=True,
        postgresql_where=sa.text("period IS NULL"),
        sqlite_where=sa.text("period IS NULL"),
    )
    op.create_index("ix_attendance_student_id", "attendance", ["student_id"])
    op.create_index("ix_attendance_class_id", "attendance", ["class_id"])
    op.create_index("ix_attendance_date", "attendance", ["date"])
    op.create_index("ix_attendance_marked_by", "attendance", ["marked_by"])


def downgrade():
    op.drop_table("attendance")
