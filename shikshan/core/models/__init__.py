from shikshan.core.models.school import School
from shikshan.core.models.subscription import Subscription
from shikshan.core.models.payment import Payment
from shikshan.core.models.class_model import ClassTeacher, SchoolClass
from shikshan.core.models.student import Student, StudentParent
from shikshan.core.models.attendance import Attendance
from shikshan.core.models.staff_attendance import StaffAttendance
from shikshan.core.models.event import Event
from shikshan.core.models.complaint import Complaint, ComplaintUpdate
from shikshan.core.models.fee import Fee, StudentFee
from shikshan.core.models.homework import Homework, HomeworkSubmission
from shikshan.core.models.subject import Subject
from shikshan.core.models.inquiry import Inquiry
from shikshan.core.models.tenant_audit_log import TenantAuditLog
from shikshan.auth.models import Parent, Teacher, User

__all__ = [
    "School",
    "Subscription",
    "Payment",
    "SchoolClass",
    "ClassTeacher",
    "Student",
    "StudentParent",
    "Attendance",
    "StaffAttendance",
    "Event",
    "Complaint",
    "ComplaintUpdate",
    "Fee",
    "StudentFee",
    "Homework",
    "HomeworkSubmission",
    "Subject",
    "Inquiry",
    "TenantAuditLog",
    "User",
    "Teacher",
    "Parent",
]
