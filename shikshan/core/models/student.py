import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, Date, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship, validates

from shikshan.core.enums import BloodGroup, RelationshipType, TransportMode, check_in
from shikshan.core.schemas import ScholarshipDetails
from shikshan.core.validators import check_length
from shikshan.db.session import Base
from shikshan.db.types import GUID, PydanticJSON, UTCDateTime, utcnow


class Student(Base):
    """Student profile (1:1 with a user whose role is student), enrolled in one class."""

    __tablename__ = "students"
    __table_args__ = (
        UniqueConstraint("class_id", "roll_number", name="unique_class_roll_number"),
        CheckConstraint("blood_group IS NULL OR " + check_in("blood_group", BloodGroup), name="ck_students_blood_group"),
        CheckConstraint(
            "transport_mode IS NULL OR " + check_in("transport_mode", TransportMode),
            name="ck_students_transport_mode",
        ),
        Index("ix_students_class_id", "class_id"),
        Index("ix_students_roll_number", "roll_number"),
        Index("ix_students_admission_number", "admission_number"),
        Index("ix_students_custom_id", "custom_id", unique=True),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    custom_id = Column(String(20), nullable=True)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    class_id = Column(GUID(), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    roll_number = Column(String(20), nullable=False)
    admission_number = Column(String(50), nullable=False)
    admission_date = Column(Date, nullable=True)
    blood_group = Column(String(3), nullable=True)
    medical_conditions = Column(Text, nullable=True)
    previous_school = Column(String(255), nullable=True)
    transport_mode = Column(String(20), nullable=True)
    bus_route = Column(String(50), nullable=True)
    fee_category = Column(String(50), nullable=False, default="regular")
    scholarship_details = Column(
        PydanticJSON(ScholarshipDetails),
        nullable=True,
        default=lambda: ScholarshipDetails().model_dump(mode="json"),
    )
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="student_profile")
    school_class = relationship("SchoolClass", back_populates="students")
    parent_links = relationship(
        "StudentParent", back_populates="student", cascade="all, delete-orphan", passive_deletes=True
    )
    parents = relationship("User", secondary="student_parents", viewonly=True)
    fees = relationship("StudentFee", back_populates="student", cascade="all, delete-orphan", passive_deletes=True)
    homework_submissions = relationship(
        "HomeworkSubmission", back_populates="student", cascade="all, delete-orphan", passive_deletes=True
    )

    @validates("roll_number", "admission_number")
    def validate_identifiers(self, key, value):
        return check_length(key, value, 1, 50)


class StudentParent(Base):
    """Link between a student and a parent user."""

    __tablename__ = "student_parents"
    __table_args__ = (
        UniqueConstraint("student_id", "parent_id", name="unique_student_parent"),
        CheckConstraint(check_in("relationship_type", RelationshipType), name="ck_student_parents_relationship_type"),
        Index("ix_student_parents_student_id", "student_id"),
        Index("ix_student_parents_parent_id", "parent_id"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    student_id = Column(GUID(), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    parent_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    relationship_type = Column(String(20), nullable=False, default=RelationshipType.FATHER.value)
    is_primary = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    student = relationship("Student", back_populates="parent_links")
    parent = relationship("User")
