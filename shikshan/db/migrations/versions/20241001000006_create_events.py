"""Create events table."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import timestamps
from shikshan.db.types import GUID, JSONType, UTCDateTime


EVENT_TYPES = ("announcement", "event", "holiday", "exam", "meeting", "celebration")
PRIORITIES = ("low", "medium", "high", "urgent")


def upgrade():
    op.create_table(
        "events",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.String(20), nullable=False, server_default="announcement"),
        sa.Column("priority", sa.String(10), nullable=False, server_default="medium"),
        sa.Column("school_id", GUID(), sa.ForeignKey("schools.id", ondelete="CASCADE"), nullable=False),
        sa.Column("class_id", GUID(), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=True),
        sa.Column("created_by", GUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("target_audience", JSONType(), nullable=False),
        sa.Column("start_date", UTCDateTime(), nullable=True),
        sa.Column("end_date", UTCDateTime(), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("attachments", JSONType(), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("send_notification", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("notification_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("read_by", JSONType(), nullable=True),
        *timestamps(),
        sa.CheckConstraint(check_in("type", EVENT_TYPES), name="ck_events_type"),
        sa.CheckConstraint(check_in("priority", PRIORITIES), name="ck_events_priority"),
        sa.CheckConstraint("end_date IS NULL OR start_date IS NULL OR end_date >= start_date", name="ck_events_date_range"),
    )
    op.create_index("ix_events_school_id", "events", ["school_id"])
    op.create_index("ix_events_class_id", "events", ["class_id"])
    op.create_index("ix_events_created_by", "events", ["created_by"])
    op.create_index("ix_events_type", "events", ["type"])
    op.create_index("ix_events_start_date", "events", ["start_date"])
    op.create_index("ix_events_is_published", "events", ["is_published"])


def downgrade():
    op.drop_table("events")
