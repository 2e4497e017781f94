import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship, validates

from shikshan.core.enums import ContractType, Gender, RelationshipType, UserRole, check_in
from shikshan.core.schemas import EmergencyContact
from shikshan.core.validators import check_email, check_length, check_non_negative, check_phone
from shikshan.db.session import Base
from shikshan.db.types import GUID, JSONType, PydanticJSON, UTCDateTime, utcnow


class User(Base):
    """Any person who can sign in: platform admin, staff, student or parent.

    super_admin is the only role without a school; every other role belongs
    to exactly one school and is removed with it.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(check_in("role", UserRole), name="ck_users_role"),
        CheckConstraint("gender IS NULL OR " + check_in("gender", Gender), name="ck_users_gender"),
        CheckConstraint(
            "(role = 'super_admin' AND school_id IS NULL) OR (role <> 'super_admin' AND school_id IS NOT NULL)",
            name="ck_users_school_scope",
        ),
        Index("ix_users_phone", "phone"),
        Index("ix_users_school_id", "school_id"),
        Index("ix_users_role", "role"),
        Index("ix_users_is_active", "is_active"),
        Index("ix_users_custom_id", "custom_id", unique=True),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    custom_id = Column(String(20), nullable=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    # Unique across the whole system; NULL for users who sign in by phone.
    email = Column(String(255), nullable=True, unique=True)
    phone = Column(String(15), nullable=False)
    password_hash = Column(Text, nullable=True)
    role = Column(String(30), nullable=False)
    profile_pic = Column(String(500), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(10), nullable=True)
    address = Column(Text, nullable=True)
    emergency_contact = Column(PydanticJSON(EmergencyContact), nullable=True)
    school_id = Column(GUID(), ForeignKey("schools.id", ondelete="CASCADE"), nullable=True)
    employee_id = Column(String(50), nullable=True)
    joining_date = Column(Date, nullable=True)
    subjects = Column(JSONType(), nullable=True, default=list)
    permissions = Column(JSONType(), nullable=True, default=dict)
    last_login_at = Column(UTCDateTime(), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    phone_verified = Column(Boolean, nullable=False, default=False)
    two_factor_enabled = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    school = relationship("School", back_populates="users")
    student_profile = relationship(
        "Student", back_populates="user", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
    teacher_profile = relationship(
        "Teacher", back_populates="user", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
    parent_profile = relationship(
        "Parent", back_populates="user", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
    # Students this user is a parent/guardian of.
    children = relationship("Student", secondary="student_parents", viewonly=True)
    # Classes this user teaches (any subject).
    teaching_classes = relationship("SchoolClass", secondary="class_teachers", viewonly=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @validates("first_name", "last_name")
    def validate_names(self, key, value):
        return check_length(key, value, 2, 50)

    @validates("email")
    def validate_email(self, key, value):
        return check_email(key, value)

    @validates("phone")
    def validate_phone(self, key, value):
        value = check_phone(key, value)
        if value is None:
            raise ValueError("phone is required")
        return value


class Teacher(Base):
    """Teacher-specific profile (1:1 with a user whose role is teacher)."""

    __tablename__ = "teachers"
    __table_args__ = (
        CheckConstraint(
            "contract_type IS NULL OR " + check_in("contract_type", ContractType), name="ck_teachers_contract_type"
        ),
        CheckConstraint("salary IS NULL OR salary >= 0", name="ck_teachers_salary_non_negative"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    qualification = Column(String(255), nullable=True)
    experience = Column(Integer, nullable=True)  # years
    specialization = Column(JSONType(), nullable=True, default=list)
    salary = Column(Numeric(10, 2), nullable=True)
    contract_type = Column(String(20), nullable=True, default=ContractType.PERMANENT.value)
    is_class_teacher = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="teacher_profile")

    @validates("experience", "salary")
    def validate_non_negative(self, key, value):
        return check_non_negative(key, value)


class Parent(Base):
    """Parent/guardian profile (1:1 with a user whose role is parent)."""

    __tablename__ = "parents"
    __table_args__ = (
        CheckConstraint(check_in("relationship_type", RelationshipType), name="ck_parents_relationship_type"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    occupation = Column(String(255), nullable=True)
    work_address = Column(Text, nullable=True)
    work_phone = Column(String(15), nullable=True)
    relationship_type = Column(String(20), nullable=False, default=RelationshipType.FATHER.value)
    is_emergency_contact = Column(Boolean, nullable=False, default=True)
    can_pickup_child = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="parent_profile")

    @validates("work_phone")
    def validate_work_phone(self, key, value):
        return check_phone(key, value)
