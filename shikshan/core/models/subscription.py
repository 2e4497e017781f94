"""Subscription plans offered to schools. Global (not tenant-scoped)."""
import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship, validates

from shikshan.core.enums import BillingCycle, PlanType, check_in
from shikshan.core.schemas import SubscriptionFeatures
from shikshan.core.validators import check_length, check_non_negative, check_range
from shikshan.db.session import Base
from shikshan.db.types import GUID, PydanticJSON, UTCDateTime, utcnow


class Subscription(Base):
    __tablename__ = "subscriptions"
    __table_args__ = (
        CheckConstraint(check_in("plan_type", PlanType), name="ck_subscriptions_plan_type"),
        CheckConstraint(check_in("billing_cycle", BillingCycle), name="ck_subscriptions_billing_cycle"),
        CheckConstraint("price >= 0", name="ck_subscriptions_price_non_negative"),
        CheckConstraint("trial_days >= 0 AND trial_days <= 365", name="ck_subscriptions_trial_days"),
        Index("ix_subscriptions_plan_type", "plan_type"),
        Index("ix_subscriptions_is_active", "is_active"),
        Index("ix_subscriptions_sort_order", "sort_order"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    plan_type = Column(String(20), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    billing_cycle = Column(String(20), nullable=False, default=BillingCycle.MONTHLY.value)
    trial_days = Column(Integer, nullable=False, default=30)
    max_students = Column(Integer, nullable=False, default=100)
    max_teachers = Column(Integer, nullable=False, default=10)
    max_classes = Column(Integer, nullable=False, default=20)
    features = Column(
        PydanticJSON(SubscriptionFeatures),
        nullable=False,
        default=lambda: SubscriptionFeatures().model_dump(mode="json"),
    )
    is_active = Column(Boolean, nullable=False, default=True)
    is_popular = Column(Boolean, nullable=False, default=False)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    schools = relationship("School", back_populates="subscription", passive_deletes=True)
    payments = relationship("Payment", back_populates="subscription")

    @validates("name")
    def validate_name(self, key, value):
        return check_length(key, value, 2, 100)

    @validates("price")
    def validate_price(self, key, value):
        return check_non_negative(key, value)

    @validates("trial_days")
    def validate_trial_days(self, key, value):
        return check_range(key, value, 0, 365)

    @validates("max_students", "max_teachers", "max_classes")
    def validate_limits(self, key, value):
        return check_range(key, value, 1, 1000000)
