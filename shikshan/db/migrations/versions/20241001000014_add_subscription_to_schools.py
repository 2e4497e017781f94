"""Link schools to their subscription plan."""
import sqlalchemy as sa
from alembic import op

from shikshan.db.migrations.ops import create_index_if_missing
from shikshan.db.types import GUID


def upgrade():
    # batch mode: SQLite cannot add a foreign key with ALTER TABLE.
    with op.batch_alter_table("schools") as batch_op:
        batch_op.add_column(sa.Column("subscription_id", GUID(), nullable=True))
        batch_op.create_foreign_key(
            "fk_schools_subscription_id", "subscriptions", ["subscription_id"], ["id"], ondelete="SET NULL"
        )
    create_index_if_missing("ix_schools_subscription_id", "schools", ["subscription_id"])


def downgrade():
    op.drop_index("ix_schools_subscription_id", table_name="schools")
    with op.batch_alter_table("schools") as batch_op:
        batch_op.drop_constraint("fk_schools_subscription_id", type_="foreignkey")
        batch_op.drop_column("subscription_id")
