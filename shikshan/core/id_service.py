"""
Human-readable public identifiers, alongside the UUID primary keys.

- custom ids: <prefix><yy><5-digit serial>, e.g. sch2500001, usr2500042
- admission numbers: ADM<yy><3-digit serial>, e.g. ADM25001
- employee ids: EMP<yy><3-digit serial>, e.g. EMP25007

The UUID stays the only primary key and foreign-key target; these ids are for
display, imports and support.
"""
import re
from datetime import datetime
from typing import Dict, NamedTuple, Optional, Type

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shikshan.core.exceptions import ServiceError
from shikshan.db.types import utcnow

ID_PREFIXES: Dict[str, str] = {
    "schools": "sch",
    "users": "usr",
    "students": "std",
    "teachers": "tch",
    "parents": "par",
    "classes": "cls",
    "events": "evt",
    "fees": "fee",
    "payments": "pay",
    "complaints": "cmp",
    "homework": "hmw",
    "attendance": "att",
    "subscriptions": "sub",
    "inquiries": "inq",
    "staff_attendance": "sta",
}

CUSTOM_ID_RE = re.compile(r"^(?P<prefix>[a-z]{3})(?P<year>\d{2})(?P<serial>\d{5})$")
SERIAL_RE = re.compile(r"^[0-9]+$")


class CustomId(NamedTuple):
    prefix: str
    year: int
    serial: int


def year_code(now: Optional[datetime] = None) -> str:
    """Two-digit year, e.g. "25" for 2025."""
    return f"{(now or utcnow()).year % 100:02d}"


def prefix_for(table_name: str) -> str:
    try:
        return ID_PREFIXES[table_name.lower()]
    except KeyError:
        raise ValueError(f"No custom id prefix defined for table: {table_name}") from None


def format_custom_id(table_name: str, serial: int, year: Optional[str] = None) -> str:
    if not 1 <= serial <= 99999:
        raise ValueError(f"serial {serial} out of range for a custom id")
    return f"{prefix_for(table_name)}{year or year_code()}{serial:05d}"


def format_admission_number(serial: int, year: Optional[str] = None) -> str:
    return f"ADM{year or year_code()}{serial:03d}"


def format_employee_id(serial: int, year: Optional[str] = None) -> str:
    return f"EMP{year or year_code()}{serial:03d}"


def parse_custom_id(value: str) -> Optional[CustomId]:
    match = CUSTOM_ID_RE.match(value or "")
    if not match:
        return None
    return CustomId(match["prefix"], 2000 + int(match["year"]), int(match["serial"]))


def is_valid_custom_id(value: str, table_name: str) -> bool:
    parsed = parse_custom_id(value)
    return parsed is not None and parsed.prefix == prefix_for(table_name)


async def _max_serial(db: AsyncSession, column, prefix: str) -> int:
    """Highest numeric serial among values of column that start with prefix, or 0.

    Compared as integers, so ADM261000 sorts after ADM26999. Values whose
    remainder is not all digits (legacy or hand-entered ids) are skipped.
    """
    result = await db.execute(select(column).where(column.like(f"{prefix}%")))
    serials = [int(value[len(prefix):]) for value in result.scalars() if SERIAL_RE.match(value[len(prefix):])]
    return max(serials, default=0)


async def next_custom_id(db: AsyncSession, model: Type) -> str:
    """Next free custom id for a model that has a custom_id column (schools, users, students, classes)."""
    if not hasattr(model, "custom_id"):
        raise ServiceError(f"{model.__name__} has no custom_id column", status.HTTP_500_INTERNAL_SERVER_ERROR)
    table_name = model.__tablename__
    year = year_code()
    serial = await _max_serial(db, model.custom_id, f"{prefix_for(table_name)}{year}") + 1
    return format_custom_id(table_name, serial, year)


async def next_admission_number(db: AsyncSession) -> str:
    from shikshan.core.models import Student

    year = year_code()
    serial = await _max_serial(db, Student.admission_number, f"ADM{year}") + 1
    return format_admission_number(serial, year)


async def next_employee_id(db: AsyncSession) -> str:
    from shikshan.auth.models import User

    year = year_code()
    serial = await _max_serial(db, User.employee_id, f"EMP{year}") + 1
    return format_employee_id(serial, year)
