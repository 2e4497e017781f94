"""
Seed a demo school: Greenwood International School with a principal, a
teacher, Class 10-A, one student, that student's parent and a parent-teacher
meeting.

Every demo user signs in with DEMO_USER_PASSWORD (required, no default).
Rows are looked up by natural key first, so re-running creates nothing new.
Everything is written in one transaction.

Usage: python -m shikshan.db.seed_demo_data
"""
import asyncio
from datetime import date, timedelta
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shikshan.auth.models import Parent, Teacher, User
from shikshan.auth.security import hash_password
from shikshan.core.config import Settings, get_settings
from shikshan.core.enums import (
    EventType,
    Gender,
    PlanType,
    Priority,
    RelationshipType,
    SubscriptionStatus,
    TransportMode,
    UserRole,
)
from shikshan.core.exceptions import ConfigurationError
from shikshan.core.id_service import next_custom_id, next_employee_id
from shikshan.core.models import Event, School, SchoolClass, Student, StudentParent
from shikshan.core.schemas import (
    AcademicCalendar,
    AcademicTerm,
    ClassTimetable,
    Holiday,
    SchoolSettings,
    TimetableSlot,
)
from shikshan.db.session import create_engine, create_session_factory
from shikshan.db.types import utcnow

DEMO_SCHOOL_EMAIL = "admin@greenwood.edu"
DEMO_PRINCIPAL_EMAIL = "principal@greenwood.edu"
DEMO_TEACHER_EMAIL = "sarah.johnson@greenwood.edu"
DEMO_STUDENT_EMAIL = "alex.smith@student.greenwood.edu"
DEMO_PARENT_EMAIL = "robert.smith@gmail.com"
DEMO_USER_EMAILS = (DEMO_PRINCIPAL_EMAIL, DEMO_TEACHER_EMAIL, DEMO_STUDENT_EMAIL, DEMO_PARENT_EMAIL)
DEMO_CLASS_NAME = "Class 10-A"
DEMO_ADMISSION_NUMBER = "GW2024001"
DEMO_EVENT_TITLE = "Parent-Teacher Meeting"
DEMO_ADDRESS = "456 Student Lane, Knowledge City, State 12345"


def _school_settings() -> SchoolSettings:
    return SchoolSettings(
        enable_sms=True,
        attendance_grace_period=15,
        fee_reminder_days=[7, 3, 1],
        academic_calendar=AcademicCalendar(
            start_date=date(2024, 4, 1),
            end_date=date(2025, 3, 31),
            terms=[
                AcademicTerm(name="Term 1", start_date=date(2024, 4, 1), end_date=date(2024, 9, 30)),
                AcademicTerm(name="Term 2", start_date=date(2024, 10, 1), end_date=date(2025, 3, 31)),
            ],
            holidays=[
                Holiday(name="Independence Day", date=date(2024, 8, 15)),
                Holiday(name="Gandhi Jayanti", date=date(2024, 10, 2)),
                Holiday(name="Diwali", date=date(2024, 11, 1)),
            ],
        ),
    )


def _timetable() -> ClassTimetable:
    return ClassTimetable(
        monday=[
            TimetableSlot(period=1, subject="Mathematics", teacher="Sarah Johnson", time="09:00-09:45"),
            TimetableSlot(period=2, subject="Physics", teacher="Sarah Johnson", time="09:45-10:30"),
            TimetableSlot(period=3, subject="English", teacher="Mary Smith", time="10:45-11:30"),
            TimetableSlot(period=4, subject="Chemistry", teacher="David Brown", time="11:30-12:15"),
        ],
        tuesday=[
            TimetableSlot(period=1, subject="Biology", teacher="Lisa Wilson", time="09:00-09:45"),
            TimetableSlot(period=2, subject="Hindi", teacher="Raj Kumar", time="09:45-10:30"),
            TimetableSlot(period=3, subject="Mathematics", teacher="Sarah Johnson", time="10:45-11:30"),
            TimetableSlot(period=4, subject="Physics", teacher="Sarah Johnson", time="11:30-12:15"),
        ],
    )


async def _get_user(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def _ensure_user(
    db: AsyncSession,
    password_hash: str,
    school: School,
    email: str,
    role: UserRole,
    **fields,
) -> User:
    user = await _get_user(db, email)
    if user is not None:
        print(f"{role.value} already exists, using existing:", email)
        return user
    user = User(
        custom_id=await next_custom_id(db, User),
        email=email,
        role=role.value,
        school_id=school.id,
        password_hash=password_hash,
        is_active=True,
        email_verified=True,
        phone_verified=True,
        **fields,
    )
    db.add(user)
    await db.flush()
    print(f"Created {role.value}:", email)
    return user


async def seed_demo_data(db: AsyncSession, settings: Optional[Settings] = None) -> Dict[str, object]:
    """Create (or find) every demo row. Returns them keyed by role."""
    settings = settings or get_settings()
    if not settings.demo_user_password:
        raise ConfigurationError("DEMO_USER_PASSWORD must be set to seed demo data")
    password_hash = hash_password(settings.demo_user_password)
    now = utcnow()

    # 1. School
    result = await db.execute(select(School).where(School.email == DEMO_SCHOOL_EMAIL))
    school = result.scalar_one_or_none()
    if school is None:
        school = School(
            custom_id=await next_custom_id(db, School),
            name="Greenwood International School",
            email=DEMO_SCHOOL_EMAIL,
            phone="9876543210",
            address="123 Education Street, Knowledge City, State 12345",
            established_year=2010,
            academic_year="2024-25",
            subscription_status=SubscriptionStatus.TRIAL.value,
            subscription_plan=PlanType.STANDARD.value,
            subscription_expires_at=now + timedelta(days=30),
            max_students=500,
            max_teachers=50,
            settings=_school_settings().model_dump(mode="json"),
            is_active=True,
        )
        db.add(school)
        await db.flush()
        print("Created demo school.")
    else:
        print("Demo school already exists, using existing.")

    # 2. Staff
    principal = await _ensure_user(
        db,
        password_hash,
        school,
        DEMO_PRINCIPAL_EMAIL,
        UserRole.PRINCIPAL,
        first_name="John",
        last_name="Principal",
        phone="9876543211",
        employee_id=await next_employee_id(db),
        joining_date=date(2024, 1, 1),
    )
    teacher = await _ensure_user(
        db,
        password_hash,
        school,
        DEMO_TEACHER_EMAIL,
        UserRole.TEACHER,
        first_name="Sarah",
        last_name="Johnson",
        phone="9876543212",
        employee_id=await next_employee_id(db),
        joining_date=date(2024, 1, 15),
        subjects=["Mathematics", "Physics"],
    )
    result = await db.execute(select(Teacher).where(Teacher.user_id == teacher.id))
    if result.scalar_one_or_none() is None:
        db.add(
            Teacher(
                user_id=teacher.id,
                qualification="M.Sc. Mathematics",
                experience=8,
                specialization=["Mathematics", "Physics"],
                is_class_teacher=True,
            )
        )

    # 3. Class
    result = await db.execute(
        select(SchoolClass).where(SchoolClass.school_id == school.id, SchoolClass.name == DEMO_CLASS_NAME)
    )
    school_class = result.scalar_one_or_none()
    if school_class is None:
        school_class = SchoolClass(
            custom_id=await next_custom_id(db, SchoolClass),
            name=DEMO_CLASS_NAME,
            grade="10",
            section="A",
            school_id=school.id,
            class_teacher_id=teacher.id,
            max_students=40,
            room="Room 101",
            subjects=["Mathematics", "Physics", "Chemistry", "Biology", "English", "Hindi"],
            timetable=_timetable().model_dump(mode="json"),
            is_active=True,
        )
        db.add(school_class)
        await db.flush()
        print("Created demo class.")

    # 4. Student
    student_user = await _ensure_user(
        db,
        password_hash,
        school,
        DEMO_STUDENT_EMAIL,
        UserRole.STUDENT,
        first_name="Alex",
        last_name="Smith",
        phone="9876543213",
        date_of_birth=date(2008, 5, 15),
        gender=Gender.MALE.value,
        address=DEMO_ADDRESS,
    )
    result = await db.execute(select(Student).where(Student.admission_number == DEMO_ADMISSION_NUMBER))
    student = result.scalar_one_or_none()
    if student is None:
        student = Student(
            custom_id=await next_custom_id(db, Student),
            user_id=student_user.id,
            class_id=school_class.id,
            roll_number="001",
            admission_number=DEMO_ADMISSION_NUMBER,
            admission_date=date(2024, 4, 1),
            blood_group="O+",
            transport_mode=TransportMode.SCHOOL_BUS.value,
            bus_route="Route A",
            fee_category="regular",
            is_active=True,
        )
        db.add(student)
        await db.flush()
        print("Created demo student profile.")

    # 5. Parent
    parent_user = await _ensure_user(
        db,
        password_hash,
        school,
        DEMO_PARENT_EMAIL,
        UserRole.PARENT,
        first_name="Robert",
        last_name="Smith",
        phone="9876543214",
        address=DEMO_ADDRESS,
    )
    result = await db.execute(select(Parent).where(Parent.user_id == parent_user.id))
    if result.scalar_one_or_none() is None:
        db.add(Parent(user_id=parent_user.id, relationship_type=RelationshipType.FATHER.value))
    result = await db.execute(
        select(StudentParent).where(StudentParent.student_id == student.id, StudentParent.parent_id == parent_user.id)
    )
    if result.scalar_one_or_none() is None:
        db.add(
            StudentParent(
                student_id=student.id,
                parent_id=parent_user.id,
                relationship_type=RelationshipType.FATHER.value,
                is_primary=True,
            )
        )
        print("Linked parent to student.")

    # 6. Event
    result = await db.execute(
        select(Event).where(Event.school_id == school.id, Event.title == DEMO_EVENT_TITLE)
    )
    event = result.scalar_one_or_none()
    if event is None:
        start = now + timedelta(days=7)
        event = Event(
            title=DEMO_EVENT_TITLE,
            description="Monthly parent-teacher meeting to discuss student progress and upcoming activities.",
            type=EventType.MEETING.value,
            priority=Priority.HIGH.value,
            school_id=school.id,
            created_by=principal.id,
            target_audience=["parents", "teachers"],
            start_date=start,
            end_date=start + timedelta(hours=2),
            location="School Auditorium",
            is_published=True,
            send_notification=True,
        )
        db.add(event)
        print("Created demo event.")

    await db.commit()
    print("Demo data seed done. Demo users sign in with DEMO_USER_PASSWORD.")
    return {
        "school": school,
        "principal": principal,
        "teacher": teacher,
        "class": school_class,
        "student": student,
        "parent": parent_user,
        "event": event,
    }


async def main() -> None:
    engine = create_engine()
    try:
        async with create_session_factory(engine)() as db:
            try:
                await seed_demo_data(db)
            except Exception as e:
                await db.rollback()
                print("Error:", e)
                raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
