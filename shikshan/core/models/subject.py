import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Index, String, Text, UniqueConstraint, text
from sqlalchemy.orm import relationship, validates

from shikshan.core.enums import SubjectCategory, check_in
from shikshan.core.validators import check_length
from shikshan.db.session import Base
from shikshan.db.types import GUID, UTCDateTime, utcnow


class Subject(Base):
    """School-scoped subject master. Name unique per school; code unique per school when set."""

    __tablename__ = "subjects"
    __table_args__ = (
        UniqueConstraint("name", "school_id", name="subjects_name_school_unique"),
        Index(
            "subjects_code_school_unique",
            "code",
            "school_id",
            unique=True,
            postgresql_where=text("code IS NOT NULL"),
            sqlite_where=text("code IS NOT NULL"),
        ),
        CheckConstraint(check_in("category", SubjectCategory), name="ck_subjects_category"),
        Index("subjects_school_id_index", "school_id"),
        Index("subjects_category_index", "category"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    code = Column(String(20), nullable=True)
    description = Column(Text, nullable=True)
    category = Column(String(20), nullable=False, default=SubjectCategory.CORE.value)
    is_active = Column(Boolean, nullable=False, default=True)
    school_id = Column(GUID(), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    # A user who created subjects cannot be deleted while they exist.
    created_by = Column(GUID(), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    school = relationship("School", back_populates="subjects")
    creator = relationship("User", foreign_keys=[created_by])

    @validates("name")
    def validate_name(self, key, value):
        return check_length(key, value, 1, 100)

    @validates("code")
    def validate_code(self, key, value):
        if value is not None and not value.strip():
            return None
        return check_length(key, value, 1, 20)
