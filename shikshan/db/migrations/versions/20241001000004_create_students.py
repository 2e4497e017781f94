"""Create students table."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import timestamps
from shikshan.db.types import GUID, JSONType


BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")
TRANSPORT_MODES = ("walking", "school_bus", "private_vehicle", "public_transport")


def upgrade():
    op.create_table(
        "students",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("user_id", GUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("class_id", GUID(), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("roll_number", sa.String(20), nullable=False),
        sa.Column("admission_number", sa.String(50), nullable=False),
        sa.Column("admission_date", sa.Date(), nullable=True),
        sa.Column("blood_group", sa.String(3), nullable=True),
        sa.Column("medical_conditions", sa.Text(), nullable=True),
        sa.Column("previous_school", sa.String(255), nullable=True),
        sa.Column("transport_mode", sa.String(20), nullable=True),
        sa.Column("bus_route", sa.String(50), nullable=True),
        sa.Column("fee_category", sa.String(50), nullable=False, server_default="regular"),
        sa.Column("scholarship_details", JSONType(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *timestamps(),
        sa.UniqueConstraint("class_id", "roll_number", name="unique_class_roll_number"),
        sa.CheckConstraint(
            "blood_group IS NULL OR " + check_in("blood_group", BLOOD_GROUPS), name="ck_students_blood_group"
        ),
        sa.CheckConstraint(
            "transport_mode IS NULL OR " + check_in("transport_mode", TRANSPORT_MODES),
            name="ck_students_transport_mode",
        ),
    )
    op.create_index("ix_students_class_id", "students", ["class_id"])
    op.create_index("ix_students_roll_number", "students", ["roll_number"])
    op.create_index("ix_students_admission_number", "students", ["admission_number"])


def downgrade():
    op.drop_table("students")
