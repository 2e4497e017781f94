from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class JSONColumnModel(BaseModel):
    """Base for payloads stored in JSON columns.

    Keys are stored in camelCase (the shape the web client reads) and accepted
    in either case on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    def model_dump(self, **kwargs: Any) -> Dict[str, Any]:
        kwargs.setdefault("by_alias", True)
        return super().model_dump(**kwargs)


# ----- schools.settings -----


class AcademicTerm(JSONColumnModel):
    name: str
    start_date: date
    end_date: date


class Holiday(JSONColumnModel):
    name: str
    date: date


class AcademicCalendar(JSONColumnModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    terms: List[AcademicTerm] = Field(default_factory=list)
    holidays: List[Holiday] = Field(default_factory=list)


class SchoolSettings(JSONColumnModel):
    enable_sms: bool = Field(True, alias="enableSMS")
    enable_email: bool = True
    enable_push_notifications: bool = True
    attendance_grace_period: int = Field(15, ge=0, le=120)
    fee_reminder_days: List[int] = Field(default_factory=lambda: [7, 3, 1])
    academic_calendar: AcademicCalendar = Field(default_factory=AcademicCalendar)


# ----- users.emergency_contact -----


class EmergencyContact(JSONColumnModel):
    name: Optional[str] = None
    phone: Optional[str] = Field(None, min_length=10, max_length=15)
    relationship: Optional[str] = None


# ----- classes.timetable -----


class TimetableSlot(JSONColumnModel):
    period: int = Field(..., ge=1, le=10)
    subject: str
    teacher: Optional[str] = None
    time: Optional[str] = None


class ClassTimetable(JSONColumnModel):
    monday: List[TimetableSlot] = Field(default_factory=list)
    tuesday: List[TimetableSlot] = Field(default_factory=list)
    wednesday: List[TimetableSlot] = Field(default_factory=list)
    thursday: List[TimetableSlot] = Field(default_factory=list)
    friday: List[TimetableSlot] = Field(default_factory=list)
    saturday: List[TimetableSlot] = Field(default_factory=list)


# ----- students.scholarship_details -----


class ScholarshipDetails(JSONColumnModel):
    has_scholarship: bool = False
    scholarship_type: Optional[str] = None
    scholarship_amount: float = Field(0, ge=0)
    scholarship_percentage: float = Field(0, ge=0, le=100)


# ----- complaints.feedback -----


class ComplaintFeedback(JSONColumnModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = None
    submitted_at: Optional[datetime] = None


# ----- subscriptions.features -----


class SubscriptionFeatures(JSONColumnModel):
    dashboard: bool = True
    teachers: bool = True
    students: bool = True
    classes: bool = True
    attendance: bool = True
    homework: bool = True
    events: bool = True
    complaints: bool = True
    fees: bool = True
    reports: bool = True
    sms_notifications: bool = False
    email_notifications: bool = True
    mobile_app: bool = False
    custom_branding: bool = False
    api_access: bool = False
    advanced_reports: bool = False
    bulk_import: bool = False
    parent_portal: bool = True
    online_exams: bool = False
    fee_management: bool = False
    library_management: bool = False
    transport_management: bool = False


# ----- monitoring payloads -----


class MigrationStatus(BaseModel):
    """Applied and pending migrations, by file name."""

    applied: List[str]
    pending: List[str]
    total: int
    up_to_date: bool


class DatabaseHealth(BaseModel):
    connected: bool
    dialect: Optional[str] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str  # healthy | degraded
    timestamp: datetime
    database: DatabaseHealth
    migrations: Optional[MigrationStatus] = None
    counts: Dict[str, int] = Field(default_factory=dict)
