import uuid

from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Index, Numeric, String, Text, Time, UniqueConstraint
from sqlalchemy.orm import relationship, validates

from shikshan.core.enums import StaffAttendanceStatus, check_in
from shikshan.core.validators import check_range
from shikshan.db.session import Base
from shikshan.db.types import GUID, UTCDateTime, utcnow


class StaffAttendance(Base):
    """Daily attendance of a staff user. One row per staff member per date."""

    __tablename__ = "staff_attendance"
    __table_args__ = (
        UniqueConstraint("staff_id", "date", name="staff_attendance_unique_staff_date"),
        CheckConstraint(check_in("status", StaffAttendanceStatus), name="ck_staff_attendance_status"),
        Index("staff_attendance_staff_id_idx", "staff_id"),
        Index("staff_attendance_date_idx", "date"),
        Index("staff_attendance_school_id_idx", "school_id"),
        Index("staff_attendance_marked_by_idx", "marked_by"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    staff_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=StaffAttendanceStatus.PRESENT.value)
    check_in_time = Column(Time, nullable=True)
    check_out_time = Column(Time, nullable=True)
    marked_by = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    marked_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    remarks = Column(Text, nullable=True)
    working_hours = Column(Numeric(4, 2), nullable=True, default=0)
    school_id = Column(GUID(), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    staff = relationship("User", foreign_keys=[staff_id])
    marker = relationship("User", foreign_keys=[marked_by])
    school = relationship("School")

    @validates("working_hours")
    def validate_working_hours(self, key, value):
        return check_range(key, value, 0, 24)
