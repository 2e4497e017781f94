import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship, validates

from shikshan.core.enums import EventType, Priority, check_in
from shikshan.core.validators import check_length
from shikshan.db.session import Base
from shikshan.db.types import GUID, JSONType, UTCDateTime, utcnow


class Event(Base):
    """Announcement or calendar event for a school, optionally limited to one class."""

    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint(check_in("type", EventType), name="ck_events_type"),
        CheckConstraint(check_in("priority", Priority), name="ck_events_priority"),
        CheckConstraint("end_date IS NULL OR start_date IS NULL OR end_date >= start_date", name="ck_events_date_range"),
        Index("ix_events_school_id", "school_id"),
        Index("ix_events_class_id", "class_id"),
        Index("ix_events_created_by", "created_by"),
        Index("ix_events_type", "type"),
        Index("ix_events_start_date", "start_date"),
        Index("ix_events_is_published", "is_published"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(20), nullable=False, default=EventType.ANNOUNCEMENT.value)
    priority = Column(String(10), nullable=False, default=Priority.MEDIUM.value)
    school_id = Column(GUID(), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(GUID(), ForeignKey("classes.id", ondelete="CASCADE"), nullable=True)
    created_by = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # e.g. ["all"], ["parents", "teachers"]
    target_audience = Column(JSONType(), nullable=False, default=lambda: ["all"])
    start_date = Column(UTCDateTime(), nullable=True)
    end_date = Column(UTCDateTime(), nullable=True)
    location = Column(String(255), nullable=True)
    attachments = Column(JSONType(), nullable=True, default=list)
    is_published = Column(Boolean, nullable=False, default=True)
    send_notification = Column(Boolean, nullable=False, default=True)
    notification_sent = Column(Boolean, nullable=False, default=False)
    # User ids that have read the event.
    read_by = Column(JSONType(), nullable=True, default=list)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    school = relationship("School", back_populates="events")
    school_class = relationship("SchoolClass", back_populates="events")
    creator = relationship("User", foreign_keys=[created_by])

    @validates("title")
    def validate_title(self, key, value):
        return check_length(key, value, 2, 255)
