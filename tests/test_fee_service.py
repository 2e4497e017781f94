from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shikshan.core.enums import StudentFeeStatus, UserRole
from shikshan.core.exceptions import PaymentError
from shikshan.core.fee_service import (
    create_fee_for_class,
    derive_fee_status,
    list_student_fees,
    mark_overdue_fees,
    record_payment,
)
from shikshan.core.models import StudentFee
from shikshan.db.types import utcnow

NOW = datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "amount, paid, due, expected",
    [
        (1000, 0, NOW + timedelta(days=1), StudentFeeStatus.PENDING),
        (1000, 250, NOW + timedelta(days=1), StudentFeeStatus.PARTIAL),
        (1000, 1000, NOW - timedelta(days=1), StudentFeeStatus.PAID),
        (1000, 250, NOW - timedelta(days=1), StudentFeeStatus.OVERDUE),
        (0, 0, NOW - timedelta(days=1), StudentFeeStatus.PAID),
    ],
)
def test_derive_fee_status(amount, paid, due, expected) -> None:
    assert derive_fee_status(amount, paid, due, NOW) == expected


def test_derive_fee_status_without_clock_is_never_overdue() -> None:
    assert derive_fee_status(Decimal("500"), Decimal("0"), NOW - timedelta(days=30)) == StudentFeeStatus.PENDING


@pytest.fixture()
async def class_with_students(db_session: AsyncSession, make_school, make_user, make_class, make_student):
    school = await make_school()
    admin = await make_user(school, UserRole.SCHOOL_ADMIN)
    school_class = await make_class(school)
    active = [await make_student(school_class, "01"), await make_student(school_class, "02")]
    await make_student(school_class, "03", is_active=False)
    await db_session.commit()
    return admin, school_class, active


async def _student_fees(db: AsyncSession, fee_id):
    result = await db.execute(select(StudentFee).where(StudentFee.fee_id == fee_id))
    return result.scalars().all()


async def test_create_fee_fans_out_to_active_students(db_session: AsyncSession, class_with_students) -> None:
    admin, school_class, active = class_with_students

    fee = await create_fee_for_class(
        db_session, school_class.id, admin.id, "Term 1 Tuition", 1500, utcnow() + timedelta(days=30)
    )

    assert fee.school_id == school_class.school_id
    student_fees = await _student_fees(db_session, fee.id)
    assert {sf.student_id for sf in student_fees} == {s.id for s in active}
    assert all(sf.status == StudentFeeStatus.PENDING.value for sf in student_fees)
    assert all(sf.amount == Decimal("1500") for sf in student_fees)


async def test_record_payment_partial_then_full(db_session: AsyncSession, class_with_students) -> None:
    admin, school_class, _ = class_with_students
    due = utcnow() + timedelta(days=10)
    fee = await create_fee_for_class(db_session, school_class.id, admin.id, "Lab fee", 800, due)
    student_fee = (await _student_fees(db_session, fee.id))[0]

    student_fee = await record_payment(db_session, student_fee.id, 300, payment_method="upi", transaction_id="TXN-1")
    assert student_fee.status == StudentFeeStatus.PARTIAL.value
    assert student_fee.paid_date is None
    assert student_fee.balance == Decimal("500")

    student_fee = await record_payment(db_session, student_fee.id, Decimal("500"))
    assert student_fee.status == StudentFeeStatus.PAID.value
    assert student_fee.paid_date is not None
    assert student_fee.transaction_id == "TXN-1"


async def test_record_payment_rejects_invalid_amounts(db_session: AsyncSession, class_with_students) -> None:
    admin, school_class, _ = class_with_students
    due = utcnow() + timedelta(days=10)
    fee = await create_fee_for_class(db_session, school_class.id, admin.id, "Sports", 400, due)
    student_fee = (await _student_fees(db_session, fee.id))[0]

    with pytest.raises(PaymentError):
        await record_payment(db_session, student_fee.id, 0)
    with pytest.raises(PaymentError):
        await record_payment(db_session, student_fee.id, 401)


async def test_late_partial_payment_is_overdue(db_session: AsyncSession, class_with_students) -> None:
    admin, school_class, _ = class_with_students
    due = utcnow() + timedelta(days=1)
    fee = await create_fee_for_class(db_session, school_class.id, admin.id, "Transport", 600, due)
    student_fee = (await _student_fees(db_session, fee.id))[0]

    student_fee = await record_payment(db_session, student_fee.id, 100, now=due + timedelta(days=2))
    assert student_fee.status == StudentFeeStatus.OVERDUE.value


async def test_mark_overdue_fees_skips_paid_and_future_fees(db_session: AsyncSession, class_with_students) -> None:
    admin, school_class, active = class_with_students
    past_fee = await create_fee_for_class(
        db_session, school_class.id, admin.id, "Exam fee", 200, utcnow() - timedelta(days=1)
    )
    future_fee = await create_fee_for_class(
        db_session, school_class.id, admin.id, "Annual day", 100, utcnow() + timedelta(days=5)
    )
    past_fee_id, future_fee_id = past_fee.id, future_fee.id
    payer_id, debtor_id = active[0].id, active[1].id
    paid = next(sf for sf in await _student_fees(db_session, past_fee_id) if sf.student_id == payer_id)
    await record_payment(db_session, paid.id, 200)

    changed = await mark_overdue_fees(db_session)

    assert changed == 1
    db_session.expire_all()
    statuses = {sf.student_id: sf.status for sf in await _student_fees(db_session, past_fee_id)}
    assert statuses == {payer_id: StudentFeeStatus.PAID.value, debtor_id: StudentFeeStatus.OVERDUE.value}
    assert all(sf.status == StudentFeeStatus.PENDING.value for sf in await _student_fees(db_session, future_fee_id))

    overdue = await list_student_fees(db_session, debtor_id, StudentFeeStatus.OVERDUE)
    assert [sf.fee_id for sf in overdue] == [past_fee_id]
