"""
Tenant access audit trail. Append-only; user/school/record ids are kept as
plain values (no foreign keys) so entries outlive the rows they describe.

On PostgreSQL the row-level-security migration installs triggers that write
here on every insert/update/delete of a school-scoped table.
"""
import uuid

from sqlalchemy import CheckConstraint, Column, Index, String, Text

from shikshan.core.enums import AuditLevel, check_in
from shikshan.db.session import Base
from shikshan.db.types import GUID, JSONType, UTCDateTime, utcnow


class TenantAuditLog(Base):
    __tablename__ = "tenant_audit_logs"
    __table_args__ = (
        CheckConstraint(check_in("level", AuditLevel), name="ck_tenant_audit_logs_level"),
        Index("tenant_audit_logs_user_id", "user_id"),
        Index("tenant_audit_logs_school_id", "school_id"),
        Index("tenant_audit_logs_created_at", "created_at"),
        Index("tenant_audit_logs_action", "action"),
        Index("tenant_audit_logs_level", "level"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID(), nullable=True)
    school_id = Column(GUID(), nullable=True)
    action = Column(String(50), nullable=False)
    table_name = Column(String(100), nullable=True)
    record_id = Column(GUID(), nullable=True)
    old_values = Column(JSONType(), nullable=True)
    new_values = Column(JSONType(), nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    level = Column(String(10), nullable=False, default=AuditLevel.INFO.value)
    message = Column(Text, nullable=True)
    # "metadata" is reserved on declarative classes.
    metadata_ = Column("metadata", JSONType(), nullable=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
