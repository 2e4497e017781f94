import uuid

from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Index, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import relationship, validates

from shikshan.core.enums import AttendanceStatus, check_in
from shikshan.core.validators import check_range
from shikshan.db.session import Base
from shikshan.db.types import GUID, UTCDateTime, utcnow


class Attendance(Base):
    """
    Student attendance mark for a class on a date.

    period is 1..10 for period-wise marking, NULL for a whole-day mark. One row
    per (student, class, date, period); the partial index covers the whole-day
    case since NULLs never collide in a plain unique constraint.
    """

    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("student_id", "class_id", "date", "period", name="unique_student_class_date_period"),
        Index(
            "unique_student_class_date_daily",
            "student_id",
            "class_id",
            "date",
            unique=True,
            postgresql_where=text("period IS NULL"),
            sqlite_where=text("period IS NULL"),
        ),
        CheckConstraint(check_in("status", AttendanceStatus), name="ck_attendance_status"),
        CheckConstraint("period IS NULL OR (period >= 1 AND period <= 10)", name="ck_attendance_period"),
        Index("ix_attendance_student_id", "student_id"),
        Index("ix_attendance_class_id", "class_id"),
        Index("ix_attendance_date", "date"),
        Index("ix_attendance_marked_by", "marked_by"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    student_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(GUID(), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=AttendanceStatus.PRESENT.value)
    marked_by = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    marked_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    remarks = Column(Text, nullable=True)
    period = Column(Integer, nullable=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    student = relationship("User", foreign_keys=[student_id])
    school_class = relationship("SchoolClass", back_populates="attendance")
    marker = relationship("User", foreign_keys=[marked_by])

    @validates("period")
    def validate_period(self, key, value):
        return check_range(key, value, 1, 10)
