import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, validates

from shikshan.core.enums import HomeworkType, Priority, SubmissionFormat, SubmissionStatus, check_in
from shikshan.core.validators import check_length, check_non_negative, check_range
from shikshan.db.session import Base
from shikshan.db.types import GUID, JSONType, UTCDateTime, utcnow


class Homework(Base):
    """Homework set by a teacher for a class."""

    __tablename__ = "homework"
    __table_args__ = (
        CheckConstraint(check_in("priority", Priority), name="ck_homework_priority"),
        CheckConstraint(check_in("type", HomeworkType), name="ck_homework_type"),
        CheckConstraint(check_in("submission_format", SubmissionFormat), name="ck_homework_submission_format"),
        CheckConstraint("max_marks >= 1 AND max_marks <= 1000", name="ck_homework_max_marks"),
        CheckConstraint("due_date >= assigned_date", name="ck_homework_due_after_assigned"),
        Index("ix_homework_class_id", "class_id"),
        Index("ix_homework_teacher_id", "teacher_id"),
        Index("ix_homework_school_id", "school_id"),
        Index("ix_homework_subject", "subject"),
        Index("ix_homework_due_date", "due_date"),
        Index("ix_homework_is_published", "is_published"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    instructions = Column(Text, nullable=True)
    subject = Column(String(100), nullable=False)
    class_id = Column(GUID(), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    teacher_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    school_id = Column(GUID(), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    assigned_date = Column(Date, nullable=False, default=lambda: utcnow().date())
    due_date = Column(Date, nullable=False)
    max_marks = Column(Integer, nullable=False, default=100)
    attachments = Column(JSONType(), nullable=False, default=list)
    priority = Column(String(10), nullable=False, default=Priority.MEDIUM.value)
    type = Column(String(20), nullable=False, default=HomeworkType.ASSIGNMENT.value)
    is_published = Column(Boolean, nullable=False, default=False)
    allow_late_submission = Column(Boolean, nullable=False, default=True)
    submission_format = Column(String(10), nullable=False, default=SubmissionFormat.BOTH.value)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    school_class = relationship("SchoolClass")
    teacher = relationship("User", foreign_keys=[teacher_id])
    school = relationship("School")
    submissions = relationship(
        "HomeworkSubmission", back_populates="homework", cascade="all, delete-orphan", passive_deletes=True
    )

    @validates("title")
    def validate_title(self, key, value):
        return check_length(key, value, 1, 200)

    @validates("max_marks")
    def validate_max_marks(self, key, value):
        return check_range(key, value, 1, 1000)


class HomeworkSubmission(Base):
    __tablename__ = "homework_submissions"
    __table_args__ = (
        UniqueConstraint("homework_id", "student_id", name="unique_homework_student"),
        CheckConstraint(check_in("status", SubmissionStatus), name="ck_homework_submissions_status"),
        CheckConstraint("marks_obtained IS NULL OR marks_obtained >= 0", name="ck_homework_submissions_marks"),
        Index("ix_homework_submissions_homework_id", "homework_id"),
        Index("ix_homework_submissions_student_id", "student_id"),
        Index("ix_homework_submissions_status", "status"),
        Index("ix_homework_submissions_submitted_at", "submitted_at"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    homework_id = Column(GUID(), ForeignKey("homework.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(GUID(), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    submission_text = Column(Text, nullable=True)
    attachments = Column(JSONType(), nullable=False, default=list)
    submitted_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    is_late = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default=SubmissionStatus.SUBMITTED.value)
    marks_obtained = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=True)
    graded_at = Column(UTCDateTime(), nullable=True)
    graded_by = Column(GUID(), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    homework = relationship("Homework", back_populates="submissions")
    student = relationship("Student", back_populates="homework_submissions")
    grader = relationship("User", foreign_keys=[graded_by])

    @validates("marks_obtained")
    def validate_marks(self, key, value):
        return check_non_negative(key, value)
