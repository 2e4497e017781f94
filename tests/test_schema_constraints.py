from datetime import date, timedelta
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from shikshan.auth.models import User
from shikshan.core.config import Settings
from shikshan.core.enums import AttendanceStatus, ComplaintCategory, ComplaintStatus, StudentFeeStatus, UserRole
from shikshan.core.exceptions import AppendOnlyError
from shikshan.core.models import (
    Attendance,
    Complaint,
    ComplaintUpdate,
    Fee,
    School,
    SchoolClass,
    Student,
    StudentFee,
    Subject,
)
from shikshan.core.validators import check_email
from shikshan.db.migrations.runner import migrate
from shikshan.db.session import Base, create_engine
from shikshan.db.types import utcnow


@pytest.fixture(params=["models", "migrations"])
async def engine(request, settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """Each test here runs once on the model metadata and once on the migrated schema."""
    db_engine = create_engine("sqlite+aiosqlite:///:memory:", settings=settings)
    if request.param == "migrations":
        await migrate(db_engine)
    else:
        async with db_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


async def test_school_user_class_scenario(db_session: AsyncSession, make_school, make_user, make_class) -> None:
    school = await make_school(name="Greenfield High")
    teacher = await make_user(school, UserRole.TEACHER)
    school_class = await make_class(school, "10", "A", class_teacher_id=teacher.id)
    await db_session.commit()

    result = await db_session.execute(select(SchoolClass).where(SchoolClass.school_id == school.id))
    classes = result.scalars().all()
    assert [c.id for c in classes] == [school_class.id]
    assert classes[0].class_teacher_id == teacher.id
    assert teacher.school_id == school.id

    db_session.add(SchoolClass(name="Class 10-A again", grade="10", section="A", school_id=school.id))
    with pytest.raises(IntegrityError):
        await db_session.flush()


async def test_same_grade_section_allowed_in_another_school(db_session: AsyncSession, make_school, make_class) -> None:
    await make_class(await make_school(), "5", "B")
    await make_class(await make_school(), "5", "B")
    await db_session.commit()

    count = (await db_session.execute(select(func.count()).select_from(SchoolClass))).scalar_one()
    assert count == 2


async def test_duplicate_attendance_mark_rejected(
    db_session: AsyncSession, make_school, make_user, make_class, make_student
) -> None:
    school = await make_school()
    teacher = await make_user(school, UserRole.TEACHER)
    school_class = await make_class(school)
    student = await make_student(school_class, "01")
    today = date.today()

    def mark(period):
        return Attendance(
            student_id=student.user_id,
            class_id=school_class.id,
            date=today,
            period=period,
            status=AttendanceStatus.PRESENT.value,
            marked_by=teacher.id,
        )

    db_session.add_all([mark(1), mark(2)])
    await db_session.commit()

    db_session.add(mark(1))
    with pytest.raises(IntegrityError):
        await db_session.flush()


async def test_duplicate_whole_day_attendance_rejected(
    db_session: AsyncSession, make_school, make_user, make_class, make_student
) -> None:
    school = await make_school()
    teacher = await make_user(school, UserRole.TEACHER)
    school_class = await make_class(school)
    student = await make_student(school_class, "01")

    for _ in range(2):
        db_session.add(
            Attendance(
                student_id=student.user_id,
                class_id=school_class.id,
                date=date.today(),
                period=None,
                marked_by=teacher.id,
            )
        )
    with pytest.raises(IntegrityError):
        await db_session.flush()


def test_attendance_period_out_of_range_rejected_by_model() -> None:
    with pytest.raises(ValueError):
        Attendance(period=11)


async def test_duplicate_roll_number_in_class_rejected(
    db_session: AsyncSession, make_school, make_class, make_student
) -> None:
    school = await make_school()
    class_a = await make_class(school, "8", "A")
    class_b = await make_class(school, "8", "B")
    await make_student(class_a, "07")
    await make_student(class_b, "07")
    await db_session.commit()

    with pytest.raises(IntegrityError):
        await make_student(class_a, "07")


async def test_student_fee_status_follows_paid_amount(
    db_session: AsyncSession, make_school, make_user, make_class, make_student
) -> None:
    school = await make_school()
    admin = await make_user(school, UserRole.SCHOOL_ADMIN)
    school_class = await make_class(school)
    student = await make_student(school_class, "01")
    fee = Fee(
        title="Term 1 Tuition",
        amount=Decimal("1000.00"),
        due_date=utcnow() + timedelta(days=30),
        class_id=school_class.id,
        school_id=school.id,
        created_by=admin.id,
    )
    db_session.add(fee)
    await db_session.flush()

    student_fee = StudentFee(fee_id=fee.id, student_id=student.id, amount=Decimal("1000.00"), paid_amount=0)
    db_session.add(student_fee)
    await db_session.flush()
    assert student_fee.status == StudentFeeStatus.PENDING.value

    student_fee.paid_amount = Decimal("400.00")
    await db_session.flush()
    assert student_fee.status == StudentFeeStatus.PARTIAL.value

    student_fee.paid_amount = Decimal("1000.00")
    await db_session.commit()
    assert student_fee.status == StudentFeeStatus.PAID.value


async def test_overpaid_student_fee_is_stored_as_paid(
    db_session: AsyncSession, make_school, make_user, make_class, make_student
) -> None:
    school = await make_school()
    admin = await make_user(school, UserRole.SCHOOL_ADMIN)
    school_class = await make_class(school)
    student = await make_student(school_class, "01")
    fee = Fee(
        title="Sports kit",
        amount=Decimal("100.00"),
        due_date=utcnow() + timedelta(days=10),
        class_id=school_class.id,
        school_id=school.id,
        created_by=admin.id,
    )
    db_session.add(fee)
    await db_session.flush()

    student_fee = StudentFee(
        fee_id=fee.id, student_id=student.id, amount=Decimal("100.00"), paid_amount=Decimal("150.00")
    )
    db_session.add(student_fee)
    await db_session.commit()

    stored = (await db_session.execute(select(StudentFee.status).where(StudentFee.id == student_fee.id))).scalar_one()
    assert stored == StudentFeeStatus.PAID.value
    assert student_fee.balance == Decimal("-50.00")


async def test_student_fee_paid_status_with_balance_rejected_by_database(
    db_session: AsyncSession, make_school, make_user, make_class, make_student
) -> None:
    school = await make_school()
    admin = await make_user(school, UserRole.SCHOOL_ADMIN)
    school_class = await make_class(school)
    student = await make_student(school_class, "01")
    fee = Fee(
        title="Library",
        amount=Decimal("200.00"),
        due_date=utcnow(),
        class_id=school_class.id,
        school_id=school.id,
        created_by=admin.id,
    )
    db_session.add(fee)
    await db_session.flush()

    student_fee = StudentFee(fee_id=fee.id, student_id=student.id, amount=Decimal("200.00"), paid_amount=Decimal("50"))
    student_fee.status = StudentFeeStatus.PAID.value
    db_session.add(student_fee)
    with pytest.raises(IntegrityError):
        await db_session.flush()


@pytest.mark.parametrize(
    "status, resolved",
    [(ComplaintStatus.RESOLVED, False), (ComplaintStatus.OPEN, True), (ComplaintStatus.CLOSED, True)],
)
async def test_complaint_resolved_at_set_only_when_resolved(
    db_session: AsyncSession, make_school, make_user, status, resolved
) -> None:
    school = await make_school()
    parent = await make_user(school, UserRole.PARENT)
    db_session.add(
        Complaint(
            title="Broken bench in 8-A",
            description="The last bench is broken.",
            category=ComplaintCategory.INFRASTRUCTURE.value,
            status=status.value,
            school_id=school.id,
            raised_by=parent.id,
            resolved_at=utcnow() if resolved else None,
        )
    )
    with pytest.raises(IntegrityError):
        await db_session.flush()


async def test_deleting_school_cascades_to_classes_and_users(
    db_session: AsyncSession, make_school, make_user, make_class, make_student
) -> None:
    school = await make_school()
    other_school = await make_school()
    await make_user(school, UserRole.TEACHER)
    school_class = await make_class(school)
    await make_student(school_class, "01")
    await make_class(other_school)
    await db_session.commit()

    await db_session.execute(delete(School).where(School.id == school.id))
    await db_session.commit()

    classes = (await db_session.execute(select(SchoolClass.school_id))).scalars().all()
    assert classes == [other_school.id]
    users = (await db_session.execute(select(func.count()).select_from(User))).scalar_one()
    assert users == 0
    students = (await db_session.execute(select(func.count()).select_from(Student))).scalar_one()
    assert students == 0


async def test_deleting_class_teacher_clears_class_teacher_id(
    db_session: AsyncSession, make_school, make_user, make_class
) -> None:
    school = await make_school()
    teacher = await make_user(school, UserRole.TEACHER)
    school_class = await make_class(school, class_teacher_id=teacher.id)
    await db_session.commit()

    await db_session.execute(delete(User).where(User.id == teacher.id))
    await db_session.commit()

    await db_session.refresh(school_class)
    assert school_class.class_teacher_id is None


async def test_subject_creator_cannot_be_deleted(db_session: AsyncSession, make_school, make_user) -> None:
    school = await make_school()
    admin = await make_user(school, UserRole.SCHOOL_ADMIN)
    db_session.add(Subject(name="Mathematics", code="MATH", school_id=school.id, created_by=admin.id))
    await db_session.commit()

    with pytest.raises(IntegrityError):
        await db_session.execute(delete(User).where(User.id == admin.id))


async def test_super_admin_must_not_belong_to_a_school(db_session: AsyncSession, make_school, make_user) -> None:
    await make_user(None, UserRole.SUPER_ADMIN)
    await db_session.commit()

    with pytest.raises(IntegrityError):
        await make_user(await make_school(), UserRole.SUPER_ADMIN)


async def test_school_role_requires_a_school(db_session: AsyncSession, make_user) -> None:
    with pytest.raises(IntegrityError):
        await make_user(None, UserRole.TEACHER)


async def test_unknown_role_rejected_by_database(db_session: AsyncSession, make_school) -> None:
    school = await make_school()
    db_session.add(
        User(first_name="Jo", last_name="Doe", phone="9876522222", role="janitor", school_id=school.id)
    )
    with pytest.raises(IntegrityError):
        await db_session.flush()


async def test_email_unique_across_schools(db_session: AsyncSession, make_school, make_user) -> None:
    await make_user(await make_school(), UserRole.TEACHER, email="shared@example.com")
    await db_session.commit()

    with pytest.raises(IntegrityError):
        await make_user(await make_school(), UserRole.PARENT, email="Shared@Example.com")


@pytest.mark.parametrize("value", ["not-an-email", "name@@school.com", "two words@school.com", "office@"])
def test_check_email_rejects_malformed_addresses(value) -> None:
    with pytest.raises(ValueError, match="valid email"):
        check_email("email", value)


def test_check_email_normalizes() -> None:
    assert check_email("email", "  Office@Greenwood.EDU ") == "office@greenwood.edu"
    assert check_email("email", "   ") is None


def test_model_validation_rejects_bad_values() -> None:
    with pytest.raises(ValueError):
        User(first_name="A")
    with pytest.raises(ValueError):
        User(email="not-an-email")
    with pytest.raises(ValueError):
        User(phone="12345")
    with pytest.raises(ValueError):
        SchoolClass(max_students=101)
    with pytest.raises(ValueError):
        Fee(amount=Decimal("-1"))


async def test_complaint_updates_are_append_only(db_session: AsyncSession, make_school, make_user) -> None:
    school = await make_school()
    parent = await make_user(school, UserRole.PARENT)
    complaint = Complaint(
        title="Bus arrives late",
        description="Route A is 20 minutes late every day.",
        category=ComplaintCategory.TRANSPORT.value,
        school_id=school.id,
        raised_by=parent.id,
    )
    db_session.add(complaint)
    await db_session.flush()
    entry = ComplaintUpdate(complaint_id=complaint.id, updated_by=parent.id, message="Please check")
    db_session.add(entry)
    await db_session.commit()

    entry.message = "Edited"
    with pytest.raises(AppendOnlyError):
        await db_session.flush()
    await db_session.rollback()

    await db_session.delete(entry)
    with pytest.raises(AppendOnlyError):
        await db_session.flush()
