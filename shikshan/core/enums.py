from enum import Enum
from typing import Iterable, List, Type, Union


def enum_values(enum_cls: Type[Enum]) -> List[str]:
    return [member.value for member in enum_cls]


def check_in(column: str, values: Union[Type[Enum], Iterable[str]]) -> str:
    """SQL fragment for a CHECK constraint restricting column to the given values.

    Models pass the live enum; migrations pass the literal values they shipped with.
    """
    if isinstance(values, type) and issubclass(values, Enum):
        values = enum_values(values)
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({quoted})"


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    SCHOOL_ADMIN = "school_admin"
    PRINCIPAL = "principal"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"
    FINANCE_OFFICER = "finance_officer"
    SUPPORT_STAFF = "support_staff"


STAFF_ROLES = (
    UserRole.SCHOOL_ADMIN,
    UserRole.PRINCIPAL,
    UserRole.TEACHER,
    UserRole.FINANCE_OFFICER,
    UserRole.SUPPORT_STAFF,
)


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class SubscriptionStatus(str, Enum):
    TRIAL = "trial"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"


class PlanType(str, Enum):
    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"


class BillingCycle(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class BloodGroup(str, Enum):
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"


class TransportMode(str, Enum):
    WALKING = "walking"
    SCHOOL_BUS = "school_bus"
    PRIVATE_VEHICLE = "private_vehicle"
    PUBLIC_TRANSPORT = "public_transport"


class RelationshipType(str, Enum):
    FATHER = "father"
    MOTHER = "mother"
    GUARDIAN = "guardian"
    OTHER = "other"


class ContractType(str, Enum):
    PERMANENT = "permanent"
    CONTRACT = "contract"
    PART_TIME = "part_time"
    SUBSTITUTE = "substitute"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half_day"
    EXCUSED = "excused"


class StaffAttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half_day"
    SICK_LEAVE = "sick_leave"
    CASUAL_LEAVE = "casual_leave"
    OFFICIAL_DUTY = "official_duty"


class EventType(str, Enum):
    ANNOUNCEMENT = "announcement"
    EVENT = "event"
    HOLIDAY = "holiday"
    EXAM = "exam"
    MEETING = "meeting"
    CELEBRATION = "celebration"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ComplaintCategory(str, Enum):
    ACADEMIC = "academic"
    DISCIPLINE = "discipline"
    INFRASTRUCTURE = "infrastructure"
    TRANSPORT = "transport"
    FEE = "fee"
    OTHER = "other"


class ComplaintStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"
    REJECTED = "rejected"


class ComplaintUpdateType(str, Enum):
    COMMENT = "comment"
    STATUS_CHANGE = "status_change"
    ASSIGNMENT = "assignment"
    RESOLUTION = "resolution"


class FeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class StudentFeeStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


class HomeworkType(str, Enum):
    ASSIGNMENT = "assignment"
    PROJECT = "project"
    READING = "reading"
    PRACTICE = "practice"
    RESEARCH = "research"


class SubmissionFormat(str, Enum):
    TEXT = "text"
    FILE = "file"
    BOTH = "both"


class SubmissionStatus(str, Enum):
    SUBMITTED = "submitted"
    GRADED = "graded"
    RETURNED = "returned"


class SubjectCategory(str, Enum):
    CORE = "core"
    ELECTIVE = "elective"
    EXTRACURRICULAR = "extracurricular"
    LANGUAGE = "language"
    SCIENCE = "science"
    ARTS = "arts"
    SPORTS = "sports"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    UPI = "upi"
    NET_BANKING = "net_banking"
    WALLET = "wallet"
    BANK_TRANSFER = "bank_transfer"


class InquiryStatus(str, Enum):
    PENDING = "Pending"
    DEMO_PLANNED = "Demo Planned"
    DEMO_DONE = "Demo Done"
    DENIED = "Denied"
    ONBOARDED = "Onboarded"


class AuditLevel(str, Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    SECURITY = "security"
