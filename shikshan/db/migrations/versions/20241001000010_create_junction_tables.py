"""Create student_parents and class_teachers link tables."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import timestamps
from shikshan.db.types import GUID


RELATIONSHIP_TYPES = ("father", "mother", "guardian", "other")


def upgrade():
    op.create_table(
        "student_parents",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("student_id", GUID(), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("parent_id", GUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("relationship_type", sa.String(20), nullable=False, server_default="father"),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        *timestamps(),
        sa.UniqueConstraint("student_id", "parent_id", name="unique_student_parent"),
        sa.CheckConstraint(
            check_in("relationship_type", RELATIONSHIP_TYPES), name="ck_student_parents_relationship_type"
        ),
    )
    op.create_index("ix_student_parents_student_id", "student_parents", ["student_id"])
    op.create_index("ix_student_parents_parent_id", "student_parents", ["parent_id"])

    op.create_table(
        "class_teachers",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("class_id", GUID(), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("teacher_id", GUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("subject", sa.String(100), nullable=False),
        sa.Column("is_class_teacher", sa.Boolean(), nullable=False, server_default=sa.false()),
        *timestamps(),
        sa.UniqueConstraint("class_id", "teacher_id", "subject", name="unique_class_teacher_subject"),
    )
    op.create_index("ix_class_teachers_class_id", "class_teachers", ["class_id"])
    op.create_index("ix_class_teachers_teacher_id", "class_teachers", ["teacher_id"])


def downgrade():
    op.drop_table("class_teachers")
    op.drop_table("student_parents")
