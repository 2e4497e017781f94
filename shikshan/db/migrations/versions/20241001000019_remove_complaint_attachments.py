"""Drop complaint attachments and the 'attachment' complaint update type."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.types import JSONType

LEGACY_UPDATE_TYPES = "update_type IN ('comment', 'status_change', 'assignment', 'resolution', 'attachment')"
UPDATE_TYPES = ("comment", "status_change", "assignment", "resolution")


def upgrade():
    op.drop_column("complaints", "attachments")
    # Keep the history rows; their text survives as comments.
    op.execute(sa.text("UPDATE complaint_updates SET update_type = 'comment' WHERE update_type = 'attachment'"))
    # complaint_updates has no dependents, so recreating it in batch mode is safe.
    with op.batch_alter_table("complaint_updates") as batch_op:
        batch_op.drop_column("attachments")
        batch_op.drop_constraint("ck_complaint_updates_update_type", type_="check")
        batch_op.create_check_constraint(
            "ck_complaint_updates_update_type", check_in("update_type", UPDATE_TYPES)
        )


def downgrade():
    with op.batch_alter_table("complaint_updates") as batch_op:
        batch_op.add_column(sa.Column("attachments", JSONType(), nullable=True))
        batch_op.drop_constraint("ck_complaint_updates_update_type", type_="check")
        batch_op.create_check_constraint("ck_complaint_updates_update_type", LEGACY_UPDATE_TYPES)
    op.add_column("complaints", sa.Column("attachments", JSONType(), nullable=True))
