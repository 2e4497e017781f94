"""Sales inquiries from prospective schools (contact form). Not tenant-scoped."""
from sqlalchemy import CheckConstraint, Column, Index, Integer, String, Text
from sqlalchemy.orm import validates

from shikshan.core.enums import InquiryStatus, check_in
from shikshan.core.validators import check_email, check_length, check_phone
from shikshan.db.session import Base
from shikshan.db.types import UTCDateTime, utcnow


class Inquiry(Base):
    __tablename__ = "inquiries"
    __table_args__ = (
        CheckConstraint(check_in("status", InquiryStatus), name="ck_inquiries_status"),
        Index("ix_inquiries_status", "status"),
        Index("ix_inquiries_email", "email"),
        Index("ix_inquiries_created_at", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(15), nullable=False)
    school_name = Column(String(200), nullable=False)
    designation = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    # Pending -> Demo Planned -> Demo Done -> Denied | Onboarded
    status = Column(String(20), nullable=False, default=InquiryStatus.PENDING.value)
    notes = Column(Text, nullable=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    @validates("name")
    def validate_name(self, key, value):
        return check_length(key, value, 2, 100)

    @validates("school_name")
    def validate_school_name(self, key, value):
        return check_length(key, value, 2, 200)

    @validates("email")
    def validate_email(self, key, value):
        value = check_email(key, value)
        if value is None:
            raise ValueError("email is required")
        return value

    @validates("phone")
    def validate_phone(self, key, value):
        value = check_phone(key, value)
        if value is None:
            raise ValueError("phone is required")
        return value
