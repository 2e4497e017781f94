"""Create subjects table (school-scoped subject master)."""
import sqlalchemy as sa
from alembic import op

from shikshan.core.enums import check_in
from shikshan.db.migrations.ops import timestamps
from shikshan.db.types import GUID


SUBJECT_CATEGORIES = ("core", "elective", "extracurricular", "language", "science", "arts", "sports")


def upgrade():
    op.create_table(
        "subjects",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("code", sa.String(20), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(20), nullable=False, server_default="core"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("school_id", GUID(), sa.ForeignKey("schools.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_by", GUID(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        *timestamps(),
        sa.UniqueConstraint("name", "school_id", name="subjects_name_school_unique"),
        sa.CheckConstraint(check_in("category", SUBJECT_CATEGORIES), name="ck_subjects_category"),
    )
    op.create_index(
        "subjects_code_school_unique",
        "subjects",
        ["code", "school_id"],
        unique=True,
        postgresql_where=sa.text("code IS NOT NULL"),
        sqlite_where=sa.text("code IS NOT NULL"),
    )
    op.create_index("subjects_school_id_index", "subjects", ["school_id"])
    op.create_index("subjects_category_index", "subjects", ["category"])


def downgrade():
    op.drop_table("subjects")
