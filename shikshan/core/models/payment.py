"""Subscription payments made by a school."""
import uuid

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import relationship, validates

from shikshan.core.enums import PaymentMethod, PaymentStatus, check_in
from shikshan.core.validators import check_non_negative
from shikshan.db.session import Base
from shikshan.db.types import GUID, JSONType, UTCDateTime, utcnow


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint(check_in("status", PaymentStatus), name="ck_payments_status"),
        CheckConstraint(
            "payment_method IS NULL OR " + check_in("payment_method", PaymentMethod),
            name="ck_payments_payment_method",
        ),
        CheckConstraint("amount >= 0", name="ck_payments_amount_non_negative"),
        Index("ix_payments_school_id", "school_id"),
        Index("ix_payments_subscription_id", "subscription_id"),
        Index("ix_payments_status", "status"),
        Index("ix_payments_billing_period", "billing_period_start", "billing_period_end"),
        Index("ix_payments_created_at", "created_at"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    school_id = Column(GUID(), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    subscription_id = Column(GUID(), ForeignKey("subscriptions.id", ondelete="RESTRICT"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_method = Column(String(20), nullable=True)
    transaction_id = Column(String(255), nullable=True, unique=True)
    gateway_transaction_id = Column(String(255), nullable=True)
    gateway_response = Column(JSONType(), nullable=True)
    billing_period_start = Column(UTCDateTime(), nullable=False)
    billing_period_end = Column(UTCDateTime(), nullable=False)
    due_date = Column(UTCDateTime(), nullable=True)
    paid_at = Column(UTCDateTime(), nullable=True)
    failure_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    invoice_number = Column(String(100), nullable=True, unique=True)
    tax_amount = Column(Numeric(10, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    # "metadata" is reserved on declarative classes.
    metadata_ = Column("metadata", JSONType(), nullable=True, default=dict)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    school = relationship("School", back_populates="payments")
    subscription = relationship("Subscription", back_populates="payments")

    @validates("amount", "tax_amount", "discount_amount")
    def validate_amounts(self, key, value):
        return check_non_negative(key, value)
