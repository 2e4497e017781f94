import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship, validates

from shikshan.core.enums import FeeStatus, StudentFeeStatus, check_in
from shikshan.core.validators import check_length, check_non_negative
from shikshan.db.session import Base
from shikshan.db.types import GUID, UTCDateTime, utcnow

Amount = Union[int, float, Decimal, None]


def to_decimal(value: Amount) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def derive_fee_status(
    amount: Amount,
    paid_amount: Amount,
    due_date: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> StudentFeeStatus:
    """Status of a student fee from what is owed, what is paid and when it was due.

    Without a due date (or without a clock) a fee can never be overdue.
    """
    amount = to_decimal(amount)
    paid_amount = to_decimal(paid_amount)
    if paid_amount >= amount:
        return StudentFeeStatus.PAID
    if due_date is not None and now is not None and due_date < now:
        return StudentFeeStatus.OVERDUE
    if paid_amount > 0:
        return StudentFeeStatus.PARTIAL
    return StudentFeeStatus.PENDING


class Fee(Base):
    """A fee levied on a class (e.g. "Term 1 Tuition"); fanned out to StudentFee rows."""

    __tablename__ = "fees"
    __table_args__ = (
        CheckConstraint(check_in("status", FeeStatus), name="ck_fees_status"),
        CheckConstraint("amount >= 0", name="ck_fees_amount_non_negative"),
        Index("ix_fees_class_id", "class_id"),
        Index("ix_fees_school_id", "school_id"),
        Index("ix_fees_due_date", "due_date"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    due_date = Column(UTCDateTime(), nullable=False)
    class_id = Column(GUID(), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    school_id = Column(GUID(), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    created_by = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False, default=FeeStatus.ACTIVE.value)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    school_class = relationship("SchoolClass")
    school = relationship("School")
    creator = relationship("User", foreign_keys=[created_by])
    student_fees = relationship("StudentFee", back_populates="fee", cascade="all, delete-orphan", passive_deletes=True)

    @validates("title")
    def validate_title(self, key, value):
        return check_length(key, value, 1, 255)

    @validates("amount")
    def validate_amount(self, key, value):
        return check_non_negative(key, value)


class StudentFee(Base):
    """
    One student's share of a Fee.

    status is derived from amount and paid_amount whenever either is written;
    the time-based overdue state is applied by fee_service.
    """

    __tablename__ = "student_fees"
    __table_args__ = (
        UniqueConstraint("fee_id", "student_id", name="unique_fee_student"),
        CheckConstraint(check_in("status", StudentFeeStatus), name="ck_student_fees_status"),
        CheckConstraint("amount >= 0 AND paid_amount >= 0", name="ck_student_fees_amounts_non_negative"),
        CheckConstraint(
            "(status = 'paid' AND paid_amount >= amount) OR (status <> 'paid' AND paid_amount < amount)",
            name="ck_student_fees_status_matches_paid",
        ),
        Index("ix_student_fees_student_id", "student_id"),
        Index("ix_student_fees_status", "status"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    fee_id = Column(GUID(), ForeignKey("fees.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(GUID(), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    paid_amount = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default=StudentFeeStatus.PENDING.value)
    paid_date = Column(UTCDateTime(), nullable=True)
    payment_method = Column(String(50), nullable=True)
    transaction_id = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    fee = relationship("Fee", back_populates="student_fees")
    student = relationship("Student", back_populates="fees")

    @validates("amount", "paid_amount")
    def validate_amounts(self, key, value):
        value = check_non_negative(key, value)
        amount = value if key == "amount" else self.amount
        paid_amount = value if key == "paid_amount" else self.paid_amount
        if amount is not None:
            self.status = derive_fee_status(amount, paid_amount).value
        return value

    @property
    def balance(self) -> Decimal:
        return to_decimal(self.amount) - to_decimal(self.paid_amount)
