"""Create homework and homework_submissions tables."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import timestamps
from shikshan.db.types import GUID, JSONType, UTCDateTime


HOMEWORK_TYPES = ("assignment", "project", "reading", "practice", "research")
PRIORITIES = ("low", "medium", "high", "urgent")
SUBMISSION_FORMATS = ("text", "file", "both")
SUBMISSION_STATUSES = ("submitted", "graded", "returned")


def upgrade():
    op.create_table(
        "homework",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("instructions", sa.Text(), nullable=True),
        sa.Column("subject", sa.String(100), nullable=False),
        sa.Column("class_id", GUID(), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("teacher_id", GUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("school_id", GUID(), sa.ForeignKey("schools.id", ondelete="CASCADE"), nullable=False),
        sa.Column("assigned_date", sa.Date(), nullable=False, server_default=sa.func.current_date()),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("max_marks", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("attachments", JSONType(), nullable=False),
        sa.Column("priority", sa.String(10), nullable=False, server_default="medium"),
        sa.Column("type", sa.String(20), nullable=False, server_default="assignment"),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("allow_late_submission", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("submission_format", sa.String(10), nullable=False, server_default="both"),
        *timestamps(),
        sa.CheckConstraint(check_in("priority", PRIORITIES), name="ck_homework_priority"),
        sa.CheckConstraint(check_in("type", HOMEWORK_TYPES), name="ck_homework_type"),
        sa.CheckConstraint(check_in("submission_format", SUBMISSION_FORMATS), name="ck_homework_submission_format"),
        sa.CheckConstraint("max_marks >= 1 AND max_marks <= 1000", name="ck_homework_max_marks"),
        sa.CheckConstraint("due_date >= assigned_date", name="ck_homework_due_after_assigned"),
    )
    op.create_index("ix_homework_class_id", "homework", ["class_id"])
    op.create_index("ix_homework_teacher_id", "homework", ["teacher_id"])
    op.create_index("ix_homework_school_id", "homework", ["school_id"])
    op.create_index("ix_homework_subject", "homework", ["subject"])
    op.create_index("ix_homework_due_date", "homework", ["due_date"])
    op.create_index("ix_homework_is_published", "homework", ["is_published"])

    op.create_table(
        "homework_submissions",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("homework_id", GUID(), sa.ForeignKey("homework.id", ondelete="CASCADE"), nullable=False),
        sa.Column("student_id", GUID(), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("submission_text", sa.Text(), nullable=True),
        sa.Column("attachments", JSONType(), nullable=False),
        sa.Column("submitted_at", UTCDateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("is_late", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(20), nullable=False, server_default="submitted"),
        sa.Column("marks_obtained", sa.Integer(), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("graded_at", UTCDateTime(), nullable=True),
        sa.Column("graded_by", GUID(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *timestamps(),
        sa.UniqueConstraint("homework_id", "student_id", name="unique_homework_student"),
        sa.CheckConstraint(check_in("status", SUBMISSION_STATUSES), name="ck_homework_submissions_status"),
        sa.CheckConstraint("marks_obtained IS NULL OR marks_obtained >= 0", name="ck_homework_submissions_marks"),
    )
    op.create_index("ix_homework_submissions_homework_id", "homework_submissions", ["homework_id"])
    op.create_index("ix_homework_submissions_student_id", "homework_submissions", ["student_id"])
    op.create_index("ix_homework_submissions_status", "homework_submissions", ["status"])
    op.create_index("ix_homework_submissions_submitted_at", "homework_submissions", ["submitted_at"])


def downgrade():
    op.drop_table("homework_submissions")
    op.drop_table("homework")
