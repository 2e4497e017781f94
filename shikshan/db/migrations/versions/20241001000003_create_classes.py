"""Create classes table."""
import sqlalchemy as sa
from alembic import op

from shikshan.db.migrations.ops import timestamps
from shikshan.db.types import GUID, JSONType


def upgrade():
    op.create_table(
        "classes",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("grade", sa.String(10), nullable=False),
        sa.Column("section", sa.String(10), nullable=False),
        sa.Column("school_id", GUID(), sa.ForeignKey("schools.id", ondelete="CASCADE"), nullable=False),
        sa.Column("class_teacher_id", GUID(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("max_students", sa.Integer(), nullable=False, server_default="40"),
        sa.Column("room", sa.String(50), nullable=True),
        sa.Column("subjects", JSONType(), nullable=True),
        sa.Column("timetable", JSONType(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *timestamps(),
        sa.UniqueConstraint("school_id", "grade", "section", name="unique_school_grade_section"),
    )
    op.create_index("ix_classes_school_id", "classes", ["school_id"])
    op.create_index("ix_classes_grade", "classes", ["grade"])
    op.create_index("ix_classes_class_teacher_id", "classes", ["class_teacher_id"])


def downgrade():
    op.drop_table("classes")
