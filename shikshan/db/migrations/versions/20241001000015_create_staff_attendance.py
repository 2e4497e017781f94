"""Create staff_attendance table."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import create_index_if_missing, timestamps
from shikshan.db.types import GUID, UTCDateTime


STAFF_ATTENDANCE_STATUSES = ("present", "absent", "late", "half_day", "sick_leave", "casual_leave", "official_duty")


def upgrade():
    op.create_table(
        "staff_attendance",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("staff_id", GUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="present"),
        sa.Column("check_in_time", sa.Time(), nullable=True),
        sa.Column("check_out_time", sa.Time(), nullable=True),
        sa.Column("marked_by", GUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("marked_at", UTCDateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("working_hours", sa.Numeric(4, 2), nullable=True, server_default="0"),
        sa.Column("school_id", GUID(), sa.ForeignKey("schools.id", ondelete="CASCADE"), nullable=False),
        *timestamps(),
        sa.UniqueConstraint("staff_id", "date", name="staff_attendance_unique_staff_date"),
        sa.CheckConstraint(check_in("status", STAFF_ATTENDANCE_STATUSES), name="ck_staff_attendance_status"),
    )
    for column in ("staff_id", "date", "school_id", "marked_by"):
        create_index_if_missing(f"staff_attendance_{column}_idx", "staff_attendance", [column])


def downgrade():
    op.drop_table("staff_attendance")
