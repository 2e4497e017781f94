"""Create teachers table."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import timestamps
from shikshan.db.types import GUID, JSONType


CONTRACT_TYPES = ("permanent", "contract", "part_time", "substitute")


def upgrade():
    op.create_table(
        "teachers",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("user_id", GUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("qualification", sa.String(255), nullable=True),
        sa.Column("experience", sa.Integer(), nullable=True),
        sa.Column("specialization", JSONType(), nullable=True),
        sa.Column("salary", sa.Numeric(10, 2), nullable=True),
        sa.Column("contract_type", sa.String(20), nullable=True, server_default="permanent"),
        sa.Column("is_class_teacher", sa.Boolean(), nullable=False, server_default=sa.false()),
        *timestamps(),
        sa.CheckConstraint(
            "contract_type IS NULL OR " + check_in("contract_type", CONTRACT_TYPES), name="ck_teachers_contract_type"
        ),
        sa.CheckConstraint("salary IS NULL OR salary >= 0", name="ck_teachers_salary_non_negative"),
    )


def downgrade():
    op.drop_table("teachers")
