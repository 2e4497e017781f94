"""
Class fees and per-student fee accounts.

A Fee is created for a class and fanned out to one StudentFee per active
student. StudentFee.status is always derived from amount, paid_amount and the
fee's due date (see derive_fee_status).
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union
from uuid import UUID

from fastapi import status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shikshan.core.enums import FeeStatus, StudentFeeStatus
from shikshan.core.exceptions import PaymentError, ServiceError
from shikshan.core.models import Fee, SchoolClass, Student, StudentFee
from shikshan.core.models.fee import derive_fee_status, to_decimal
from shikshan.db.types import utcnow

logger = logging.getLogger(__name__)

__all__ = [
    "derive_fee_status",
    "create_fee_for_class",
    "record_payment",
    "mark_overdue_fees",
    "list_student_fees",
]


async def create_fee_for_class(
    db: AsyncSession,
    class_id: UUID,
    created_by: UUID,
    title: str,
    amount: Union[int, float, Decimal],
    due_date: datetime,
    description: Optional[str] = None,
) -> Fee:
    """Create a Fee for a class and one pending StudentFee per active student, in one transaction."""
    school_class = await db.get(SchoolClass, class_id)
    if school_class is None:
        raise ServiceError("Class not found", status.HTTP_404_NOT_FOUND)

    fee = Fee(
        title=title,
        description=description,
        amount=to_decimal(amount),
        due_date=due_date,
        class_id=school_class.id,
        school_id=school_class.school_id,
        created_by=created_by,
        status=FeeStatus.ACTIVE.value,
    )
    db.add(fee)
    await db.flush()

    result = await db.execute(
        select(Student.id).where(Student.class_id == school_class.id, Student.is_active.is_(True))
    )
    student_ids = result.scalars().all()
    for student_id in student_ids:
        db.add(StudentFee(fee_id=fee.id, student_id=student_id, amount=fee.amount, paid_amount=Decimal("0")))

    await db.commit()
    await db.refresh(fee)
    logger.info("Fee %s created for class %s with %d student accounts", fee.id, class_id, len(student_ids))
    return fee


async def record_payment(
    db: AsyncSession,
    student_fee_id: UUID,
    amount: Union[int, float, Decimal],
    payment_method: Optional[str] = None,
    transaction_id: Optional[str] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> StudentFee:
    """
    Apply a payment to a student fee.

    Rejects non-positive payments and payments larger than the outstanding
    balance. paid_date is stamped when the fee becomes fully paid.
    """
    payment = to_decimal(amount)
    if payment <= 0:
        raise PaymentError("Valid payment amount is required")

    student_fee = await db.get(StudentFee, student_fee_id)
    if student_fee is None:
        raise ServiceError("Student fee not found", status.HTTP_404_NOT_FOUND)
    fee = await db.get(Fee, student_fee.fee_id)

    new_paid = to_decimal(student_fee.paid_amount) + payment
    if new_paid > to_decimal(student_fee.amount):
        raise PaymentError("Payment amount exceeds remaining balance")

    now = now or utcnow()
    student_fee.paid_amount = new_paid
    new_status = derive_fee_status(student_fee.amount, new_paid, fee.due_date, now)
    student_fee.status = new_status.value
    if new_status == StudentFeeStatus.PAID:
        student_fee.paid_date = now
    if payment_method is not None:
        student_fee.payment_method = payment_method
    if transaction_id is not None:
        student_fee.transaction_id = transaction_id
    if notes is not None:
        student_fee.notes = notes

    await db.commit()
    await db.refresh(student_fee)
    logger.info("Payment of %s recorded on student fee %s (%s)", payment, student_fee.id, student_fee.status)
    return student_fee


async def mark_overdue_fees(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """Flag every unpaid student fee whose fee is past due. Returns the number of rows changed."""
    now = now or utcnow()
    past_due = select(Fee.id).where(Fee.due_date < now)
    result = await db.execute(
        update(StudentFee)
        .where(
            StudentFee.fee_id.in_(past_due),
            StudentFee.status.in_([StudentFeeStatus.PENDING.value, StudentFeeStatus.PARTIAL.value]),
        )
        .values(status=StudentFeeStatus.OVERDUE.value, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    if result.rowcount:
        logger.info("Marked %d student fees overdue", result.rowcount)
    return result.rowcount


async def list_student_fees(
    db: AsyncSession,
    student_id: UUID,
    status_filter: Optional[StudentFeeStatus] = None,
) -> List[StudentFee]:
    q = select(StudentFee).where(StudentFee.student_id == student_id)
    if status_filter is not None:
        q = q.where(StudentFee.status == StudentFeeStatus(status_filter).value)
    q = q.order_by(StudentFee.created_at.desc())
    result = await db.execute(q)
    return list(result.scalars().all())
