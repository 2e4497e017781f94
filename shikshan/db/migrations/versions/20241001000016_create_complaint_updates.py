"""Create complaint_updates table (append-only complaint history)."""
import sqlalchemy as sa
from alembic import op

from shikshan.db.migrations.ops import timestamps
from shikshan.db.types import GUID, JSONType


def upgrade():
    op.create_table(
        "complaint_updates",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("complaint_id", GUID(), sa.ForeignKey("complaints.id", ondelete="CASCADE"), nullable=False),
        sa.Column("updated_by", GUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("update_type", sa.String(20), nullable=False, server_default="comment"),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("previous_value", sa.String(255), nullable=True),
        sa.Column("new_value", sa.String(255), nullable=True),
        sa.Column("is_internal", sa.Boolean(), nullable=False, server_default=sa.false()),
        # Dropped again by 20241001000019, together with the 'attachment' update type.
        sa.Column("attachments", JSONType(), nullable=True),
        *timestamps(),
        sa.CheckConstraint(
            "update_type IN ('comment', 'status_change', 'assignment', 'resolution', 'attachment')",
            name="ck_complaint_updates_update_type",
        ),
    )
    op.create_index("ix_complaint_updates_complaint_id", "complaint_updates", ["complaint_id"])
    op.create_index("ix_complaint_updates_updated_by", "complaint_updates", ["updated_by"])
    op.create_index("ix_complaint_updates_created_at", "complaint_updates", ["created_at"])


def downgrade():
    op.drop_table("complaint_updates")
