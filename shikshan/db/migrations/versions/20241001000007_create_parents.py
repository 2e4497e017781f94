"""Create parents table."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import timestamps
from shikshan.db.types import GUID


RELATIONSHIP_TYPES = ("father", "mother", "guardian", "other")


def upgrade():
    op.create_table(
        "parents",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("user_id", GUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("occupation", sa.String(255), nullable=True),
        sa.Column("work_address", sa.Text(), nullable=True),
        sa.Column("work_phone", sa.String(15), nullable=True),
        sa.Column("relationship_type", sa.String(20), nullable=False, server_default="father"),
        sa.Column("is_emergency_contact", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("can_pickup_child", sa.Boolean(), nullable=False, server_default=sa.true()),
        *timestamps(),
        sa.CheckConstraint(check_in("relationship_type", RELATIONSHIP_TYPES), name="ck_parents_relationship_type"),
    )


def downgrade():
    op.drop_table("parents")
