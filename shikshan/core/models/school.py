import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship, validates

from shikshan.core.enums import PlanType, SubscriptionStatus, check_in
from shikshan.core.schemas import SchoolSettings
from shikshan.core.validators import check_email, check_length, check_phone, check_range
from shikshan.db.session import Base
from shikshan.db.types import GUID, PydanticJSON, UTCDateTime, utcnow


class School(Base):
    """Tenant root. Every tenant-owned row hangs off a school; soft delete via is_active."""

    __tablename__ = "schools"
    __table_args__ = (
        CheckConstraint(check_in("subscription_status", SubscriptionStatus), name="ck_schools_subscription_status"),
        CheckConstraint(check_in("subscription_plan", PlanType), name="ck_schools_subscription_plan"),
        Index("ix_schools_subscription_status", "subscription_status"),
        Index("ix_schools_is_active", "is_active"),
        Index("ix_schools_custom_id", "custom_id", unique=True),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    custom_id = Column(String(20), nullable=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(15), nullable=True)
    address = Column(Text, nullable=True)
    logo = Column(String(500), nullable=True)
    website = Column(String(255), nullable=True)
    established_year = Column(Integer, nullable=True)
    academic_year = Column(String(20), nullable=False, default="2024-25")
    timezone = Column(String(50), nullable=False, default="Asia/Kolkata")
    locale = Column(String(10), nullable=False, default="en")
    currency = Column(String(3), nullable=False, default="INR")
    subscription_status = Column(String(20), nullable=False, default=SubscriptionStatus.TRIAL.value)
    subscription_plan = Column(String(20), nullable=False, default=PlanType.BASIC.value)
    subscription_expires_at = Column(UTCDateTime(), nullable=True)
    subscription_id = Column(GUID(), ForeignKey("subscriptions.id", ondelete="SET NULL"), nullable=True, index=True)
    max_students = Column(Integer, nullable=False, default=100)
    max_teachers = Column(Integer, nullable=False, default=10)
    settings = Column(PydanticJSON(SchoolSettings), nullable=True, default=lambda: SchoolSettings().model_dump(mode="json"))
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    subscription = relationship("Subscription", back_populates="schools")
    users = relationship("User", back_populates="school", cascade="all, delete-orphan", passive_deletes=True)
    classes = relationship("SchoolClass", back_populates="school", cascade="all, delete-orphan", passive_deletes=True)
    events = relationship("Event", back_populates="school", cascade="all, delete-orphan", passive_deletes=True)
    complaints = relationship("Complaint", back_populates="school", cascade="all, delete-orphan", passive_deletes=True)
    payments = relationship("Payment", back_populates="school", cascade="all, delete-orphan", passive_deletes=True)
    subjects = relationship("Subject", back_populates="school", cascade="all, delete-orphan", passive_deletes=True)

    @validates("name")
    def validate_name(self, key, value):
        return check_length(key, value, 2, 100)

    @validates("email")
    def validate_email(self, key, value):
        value = check_email(key, value)
        if value is None:
            raise ValueError("email is required")
        return value

    @validates("phone")
    def validate_phone(self, key, value):
        return check_phone(key, value)

    @validates("established_year")
    def validate_established_year(self, key, value):
        return check_range(key, value, 1800, utcnow().year)

    @validates("max_students", "max_teachers")
    def validate_limits(self, key, value):
        return check_range(key, value, 1, 100000)
