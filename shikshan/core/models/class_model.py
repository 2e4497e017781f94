"""School classes (grade + section). Model named SchoolClass to avoid Python 'class' keyword."""
import uuid

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship, validates

from shikshan.core.schemas import ClassTimetable
from shikshan.core.validators import check_length, check_range
from shikshan.db.session import Base
from shikshan.db.types import GUID, JSONType, PydanticJSON, UTCDateTime, utcnow


class SchoolClass(Base):
    """A grade/section within one school. Soft delete via is_active."""

    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint("school_id", "grade", "section", name="unique_school_grade_section"),
        Index("ix_classes_school_id", "school_id"),
        Index("ix_classes_grade", "grade"),
        Index("ix_classes_class_teacher_id", "class_teacher_id"),
        Index("ix_classes_custom_id", "custom_id", unique=True),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    custom_id = Column(String(20), nullable=True)
    name = Column(String(100), nullable=False)
    grade = Column(String(10), nullable=False)
    section = Column(String(10), nullable=False)
    school_id = Column(GUID(), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    # Cleared when the class teacher's user row is deleted.
    class_teacher_id = Column(GUID(), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    max_students = Column(Integer, nullable=False, default=40)
    room = Column(String(50), nullable=True)
    subjects = Column(JSONType(), nullable=True, default=list)
    timetable = Column(
        PydanticJSON(ClassTimetable), nullable=True, default=lambda: ClassTimetable().model_dump(mode="json")
    )
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    school = relationship("School", back_populates="classes")
    class_teacher = relationship("User", foreign_keys=[class_teacher_id])
    students = relationship("Student", back_populates="school_class", cascade="all, delete-orphan", passive_deletes=True)
    attendance = relationship(
        "Attendance", back_populates="school_class", cascade="all, delete-orphan", passive_deletes=True
    )
    events = relationship("Event", back_populates="school_class", cascade="all, delete-orphan", passive_deletes=True)
    teacher_assignments = relationship(
        "ClassTeacher", back_populates="school_class", cascade="all, delete-orphan", passive_deletes=True
    )
    teachers = relationship("User", secondary="class_teachers", viewonly=True)

    @validates("name")
    def validate_name(self, key, value):
        return check_length(key, value, 2, 100)

    @validates("grade", "section")
    def validate_grade_section(self, key, value):
        return check_length(key, value, 1, 10)

    @validates("max_students")
    def validate_max_students(self, key, value):
        return check_range(key, value, 1, 100)


class ClassTeacher(Base):
    """Teacher assigned to a class for one subject."""

    __tablename__ = "class_teachers"
    __table_args__ = (
        UniqueConstraint("class_id", "teacher_id", "subject", name="unique_class_teacher_subject"),
        Index("ix_class_teachers_class_id", "class_id"),
        Index("ix_class_teachers_teacher_id", "teacher_id"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    class_id = Column(GUID(), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    teacher_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    subject = Column(String(100), nullable=False)
    is_class_teacher = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    school_class = relationship("SchoolClass", back_populates="teacher_assignments")
    teacher = relationship("User")
