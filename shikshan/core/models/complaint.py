import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Index, String, Text, event
from sqlalchemy.orm import relationship, validates

from shikshan.core.enums import ComplaintCategory, ComplaintStatus, ComplaintUpdateType, Priority, check_in
from shikshan.core.exceptions import AppendOnlyError
from shikshan.core.schemas import ComplaintFeedback
from shikshan.core.validators import check_length
from shikshan.db.session import Base
from shikshan.db.types import GUID, PydanticJSON, UTCDateTime, utcnow


class Complaint(Base):
    """
    Complaint raised within a school.

    Status changes go through shikshan.core.complaint_service so that every
    change is recorded as a ComplaintUpdate. resolved_at is set exactly when
    status is resolved (enforced by CHECK).
    """

    __tablename__ = "complaints"
    __table_args__ = (
        CheckConstraint(check_in("category", ComplaintCategory), name="ck_complaints_category"),
        CheckConstraint(check_in("priority", Priority), name="ck_complaints_priority"),
        CheckConstraint(check_in("status", ComplaintStatus), name="ck_complaints_status"),
        CheckConstraint(
            "(status = 'resolved' AND resolved_at IS NOT NULL) OR (status <> 'resolved' AND resolved_at IS NULL)",
            name="ck_complaints_resolved_at",
        ),
        Index("ix_complaints_school_id", "school_id"),
        Index("ix_complaints_raised_by", "raised_by"),
        Index("ix_complaints_assigned_to", "assigned_to"),
        Index("ix_complaints_status", "status"),
        Index("ix_complaints_priority", "priority"),
        Index("ix_complaints_category", "category"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(20), nullable=False)
    priority = Column(String(10), nullable=False, default=Priority.MEDIUM.value)
    status = Column(String(20), nullable=False, default=ComplaintStatus.OPEN.value)
    school_id = Column(GUID(), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    raised_by = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    assigned_to = Column(GUID(), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    # Student the complaint is about, if any.
    student_id = Column(GUID(), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    sla_deadline = Column(UTCDateTime(), nullable=True)
    resolved_at = Column(UTCDateTime(), nullable=True)
    resolution = Column(Text, nullable=True)
    feedback = Column(PydanticJSON(ComplaintFeedback), nullable=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    school = relationship("School", back_populates="complaints")
    raiser = relationship("User", foreign_keys=[raised_by])
    assignee = relationship("User", foreign_keys=[assigned_to])
    student = relationship("User", foreign_keys=[student_id])
    # The database removes updates with their complaint; the ORM never deletes them itself.
    updates = relationship(
        "ComplaintUpdate",
        back_populates="complaint",
        order_by="ComplaintUpdate.created_at",
        cascade="save-update, merge",
        passive_deletes="all",
    )

    @validates("title")
    def validate_title(self, key, value):
        return check_length(key, value, 5, 200)

    @validates("description")
    def validate_description(self, key, value):
        return check_length(key, value, 1, 10000)


class ComplaintUpdate(Base):
    """Append-only history entry for a complaint (comment, status change, assignment, resolution)."""

    __tablename__ = "complaint_updates"
    __table_args__ = (
        CheckConstraint(check_in("update_type", ComplaintUpdateType), name="ck_complaint_updates_update_type"),
        Index("ix_complaint_updates_complaint_id", "complaint_id"),
        Index("ix_complaint_updates_updated_by", "updated_by"),
        Index("ix_complaint_updates_created_at", "created_at"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    complaint_id = Column(GUID(), ForeignKey("complaints.id", ondelete="CASCADE"), nullable=False)
    updated_by = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    update_type = Column(String(20), nullable=False, default=ComplaintUpdateType.COMMENT.value)
    message = Column(Text, nullable=True)
    previous_value = Column(String(255), nullable=True)
    new_value = Column(String(255), nullable=True)
    is_internal = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    complaint = relationship("Complaint", back_populates="updates")
    author = relationship("User", foreign_keys=[updated_by])


@event.listens_for(ComplaintUpdate, "before_update")
def _reject_update(mapper, connection, target) -> None:
    raise AppendOnlyError(f"complaint update {target.id} is append-only and cannot be modified")


@event.listens_for(ComplaintUpdate, "before_delete")
def _reject_delete(mapper, connection, target) -> None:
    raise AppendOnlyError(f"complaint update {target.id} is append-only and cannot be deleted")
