from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from shikshan.core.enums import UserRole
from shikshan.core.exceptions import ServiceError
from shikshan.core.id_service import (
    CustomId,
    format_admission_number,
    format_custom_id,
    format_employee_id,
    is_valid_custom_id,
    next_admission_number,
    next_custom_id,
    next_employee_id,
    parse_custom_id,
    prefix_for,
    year_code,
)
from shikshan.core.models import Event, School


def test_year_code() -> None:
    assert year_code(datetime(2025, 3, 1, tzinfo=timezone.utc)) == "25"
    assert year_code(datetime(2009, 12, 31, tzinfo=timezone.utc)) == "09"


def test_format_and_parse_custom_id() -> None:
    assert format_custom_id("schools", 1, "25") == "sch2500001"
    assert format_custom_id("Users", 42, "24") == "usr2400042"
    assert parse_custom_id("cls2400123") == CustomId("cls", 2024, 123)
    assert parse_custom_id("CLS2400123") is None
    assert parse_custom_id("") is None


def test_format_custom_id_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        prefix_for("widgets")
    with pytest.raises(ValueError):
        format_custom_id("schools", 0, "25")
    with pytest.raises(ValueError):
        format_custom_id("schools", 100000, "25")


def test_is_valid_custom_id() -> None:
    assert is_valid_custom_id("std2500007", "students")
    assert not is_valid_custom_id("std2500007", "schools")
    assert not is_valid_custom_id("std25007", "students")


def test_admission_and_employee_formats() -> None:
    assert format_admission_number(7, "25") == "ADM25007"
    assert format_employee_id(12, "24") == "EMP24012"


async def test_next_ids_continue_from_last_issued(db_session: AsyncSession, make_school, make_user) -> None:
    yy = year_code()
    assert await next_custom_id(db_session, School) == f"sch{yy}00001"

    await make_school(custom_id=f"sch{yy}00001")
    await make_school(custom_id=f"sch{yy}00009")
    school = await make_school(custom_id="sch1900050")
    assert await next_custom_id(db_session, School) == f"sch{yy}00010"

    assert await next_employee_id(db_session) == f"EMP{yy}001"
    await make_user(school, UserRole.TEACHER, employee_id=f"EMP{yy}004")
    assert await next_employee_id(db_session) == f"EMP{yy}005"

    assert await next_admission_number(db_session) == f"ADM{yy}001"


async def test_next_admission_number_past_three_digits(
    db_session: AsyncSession, make_school, make_class, make_student
) -> None:
    yy = year_code()
    school_class = await make_class(await make_school())
    await make_student(school_class, "01", admission_number=f"ADM{yy}999")
    await make_student(school_class, "02", admission_number=f"ADM{yy}-X1")

    first = await next_admission_number(db_session)
    await make_student(school_class, "03", admission_number=first)
    second = await next_admission_number(db_session)

    assert (first, second) == (f"ADM{yy}1000", f"ADM{yy}1001")


async def test_next_employee_id_skips_legacy_values(db_session: AsyncSession, make_school, make_user) -> None:
    yy = year_code()
    school = await make_school()
    await make_user(school, UserRole.TEACHER, employee_id=f"EMP{yy}OLD7")
    await make_user(school, UserRole.PRINCIPAL, employee_id=f"EMP{yy}002")

    assert await next_employee_id(db_session) == f"EMP{yy}003"


async def test_next_custom_id_requires_custom_id_column(db_session: AsyncSession) -> None:
    with pytest.raises(ServiceError):
        await next_custom_id(db_session, Event)
