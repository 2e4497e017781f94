"""
Complaint lifecycle: creation with SLA deadline and auto-assignment, status
transitions, assignment, comments and feedback.

Every change appends a ComplaintUpdate row; those rows are never modified.

    open ──> in_progress ──> resolved | closed | rejected
      └──────────────────────> resolved | closed | rejected
"""
import logging
from datetime import timedelta
from typing import Dict, FrozenSet, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shikshan.auth.models import User
from shikshan.core.enums import ComplaintCategory, ComplaintStatus, ComplaintUpdateType, Priority, UserRole
from shikshan.core.exceptions import InvalidTransitionError, ServiceError
from shikshan.core.models import Complaint, ComplaintUpdate
from shikshan.core.schemas import ComplaintFeedback
from shikshan.db.types import utcnow

logger = logging.getLogger(__name__)

TERMINAL_STATUSES: FrozenSet[ComplaintStatus] = frozenset(
    {ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED, ComplaintStatus.REJECTED}
)

ALLOWED_TRANSITIONS: Dict[ComplaintStatus, FrozenSet[ComplaintStatus]] = {
    ComplaintStatus.OPEN: frozenset({ComplaintStatus.IN_PROGRESS}) | TERMINAL_STATUSES,
    ComplaintStatus.IN_PROGRESS: TERMINAL_STATUSES,
    ComplaintStatus.RESOLVED: frozenset(),
    ComplaintStatus.CLOSED: frozenset(),
    ComplaintStatus.REJECTED: frozenset(),
}

# Hours until the complaint breaches its SLA, by priority.
SLA_HOURS: Dict[Priority, int] = {
    Priority.URGENT: 4,
    Priority.HIGH: 24,
    Priority.MEDIUM: 72,
    Priority.LOW: 168,
}


def can_transition(current: ComplaintStatus, new: ComplaintStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[current]


async def _get_complaint(db: AsyncSession, complaint_id: UUID) -> Complaint:
    complaint = await db.get(Complaint, complaint_id)
    if complaint is None:
        raise ServiceError("Complaint not found", status.HTTP_404_NOT_FOUND)
    return complaint


def _append_update(
    db: AsyncSession,
    complaint: Complaint,
    updated_by: UUID,
    update_type: ComplaintUpdateType,
    message: Optional[str] = None,
    previous_value: Optional[str] = None,
    new_value: Optional[str] = None,
    is_internal: bool = False,
) -> ComplaintUpdate:
    entry = ComplaintUpdate(
        complaint_id=complaint.id,
        updated_by=updated_by,
        update_type=update_type.value,
        message=message,
        previous_value=previous_value,
        new_value=new_value,
        is_internal=is_internal,
    )
    db.add(entry)
    return entry


async def _pick_assignee(db: AsyncSession, school_id: UUID, category: ComplaintCategory) -> Optional[User]:
    """Academic complaints go to the longest-serving active teacher, then principal, then school admin."""
    roles = [UserRole.PRINCIPAL, UserRole.SCHOOL_ADMIN]
    if category == ComplaintCategory.ACADEMIC:
        roles.insert(0, UserRole.TEACHER)
    for role in roles:
        result = await db.execute(
            select(User)
            .where(User.school_id == school_id, User.role == role.value, User.is_active.is_(True))
            .order_by(User.created_at.asc())
            .limit(1)
        )
        user = result.scalar_one_or_none()
        if user is not None:
            return user
    return None


async def create_complaint(
    db: AsyncSession,
    school_id: UUID,
    raised_by: UUID,
    title: str,
    description: str,
    category: ComplaintCategory,
    priority: Priority = Priority.MEDIUM,
    student_id: Optional[UUID] = None,
    auto_assign: bool = True,
) -> Complaint:
    """Open a complaint with an SLA deadline derived from priority, optionally auto-assigned."""
    category = ComplaintCategory(category)
    priority = Priority(priority)
    complaint = Complaint(
        school_id=school_id,
        raised_by=raised_by,
        title=title,
        description=description,
        category=category.value,
        priority=priority.value,
        student_id=student_id,
        status=ComplaintStatus.OPEN.value,
        sla_deadline=utcnow() + timedelta(hours=SLA_HOURS[priority]),
    )
    db.add(complaint)
    await db.flush()
    _append_update(db, complaint, raised_by, ComplaintUpdateType.COMMENT, message="Complaint created")

    if auto_assign:
        assignee = await _pick_assignee(db, school_id, category)
        if assignee is not None:
            complaint.assigned_to = assignee.id
            _append_update(
                db,
                complaint,
                raised_by,
                ComplaintUpdateType.ASSIGNMENT,
                message=f"Auto-assigned to {assignee.full_name}",
                new_value=str(assignee.id),
                is_internal=True,
            )
        else:
            logger.info("No assignee available for complaint %s in school %s", complaint.id, school_id)

    await db.commit()
    await db.refresh(complaint)
    return complaint


async def change_complaint_status(
    db: AsyncSession,
    complaint_id: UUID,
    new_status: ComplaintStatus,
    updated_by: UUID,
    resolution: Optional[str] = None,
    is_internal: bool = False,
) -> Complaint:
    """
    Move a complaint to new_status.

    Moving into resolved requires resolution text and stamps resolved_at.
    Raises InvalidTransitionError for a transition the lifecycle does not allow.
    """
    new_status = ComplaintStatus(new_status)
    complaint = await _get_complaint(db, complaint_id)
    current = ComplaintStatus(complaint.status)

    if not can_transition(current, new_status):
        raise InvalidTransitionError(f"Cannot change complaint status from {current.value} to {new_status.value}")

    if new_status == ComplaintStatus.RESOLVED:
        if not resolution or not resolution.strip():
            raise ServiceError("Resolution is required to resolve a complaint", status.HTTP_400_BAD_REQUEST)
        complaint.resolution = resolution.strip()
        complaint.resolved_at = utcnow()

    complaint.status = new_status.value
    _append_update(
        db,
        complaint,
        updated_by,
        ComplaintUpdateType.STATUS_CHANGE,
        message=f"Status changed from {current.value} to {new_status.value}",
        previous_value=current.value,
        new_value=new_status.value,
        is_internal=is_internal,
    )
    if new_status == ComplaintStatus.RESOLVED:
        _append_update(
            db,
            complaint,
            updated_by,
            ComplaintUpdateType.RESOLUTION,
            message=complaint.resolution,
            is_internal=is_internal,
        )

    await db.commit()
    await db.refresh(complaint)
    logger.info("Complaint %s: %s -> %s", complaint.id, current.value, new_status.value)
    return complaint


async def assign_complaint(
    db: AsyncSession,
    complaint_id: UUID,
    assignee_id: UUID,
    updated_by: UUID,
) -> Complaint:
    complaint = await _get_complaint(db, complaint_id)
    if ComplaintStatus(complaint.status) in TERMINAL_STATUSES:
        raise InvalidTransitionError(f"Cannot reassign a {complaint.status} complaint")

    assignee = await db.get(User, assignee_id)
    if assignee is None or assignee.school_id != complaint.school_id:
        raise ServiceError("Invalid assignee", status.HTTP_400_BAD_REQUEST)

    previous = complaint.assigned_to
    complaint.assigned_to = assignee.id
    _append_update(
        db,
        complaint,
        updated_by,
        ComplaintUpdateType.ASSIGNMENT,
        message=f"Complaint assigned to {assignee.full_name}",
        previous_value=str(previous) if previous else None,
        new_value=str(assignee.id),
        is_internal=True,
    )
    await db.commit()
    await db.refresh(complaint)
    return complaint


async def add_complaint_comment(
    db: AsyncSession,
    complaint_id: UUID,
    author_id: UUID,
    message: str,
    is_internal: bool = False,
) -> ComplaintUpdate:
    if not message or not message.strip():
        raise ServiceError("Comment message is required", status.HTTP_400_BAD_REQUEST)
    complaint = await _get_complaint(db, complaint_id)
    entry = _append_update(
        db, complaint, author_id, ComplaintUpdateType.COMMENT, message=message.strip(), is_internal=is_internal
    )
    await db.commit()
    await db.refresh(entry)
    return entry


async def submit_complaint_feedback(
    db: AsyncSession,
    complaint_id: UUID,
    rating: int,
    comment: Optional[str] = None,
) -> Complaint:
    """Record the raiser's rating (1-5) once the complaint is resolved or closed."""
    complaint = await _get_complaint(db, complaint_id)
    if ComplaintStatus(complaint.status) not in (ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED):
        raise ServiceError("Feedback can only be given on resolved or closed complaints", status.HTTP_400_BAD_REQUEST)
    complaint.feedback = ComplaintFeedback(rating=rating, comment=comment, submitted_at=utcnow())
    await db.commit()
    await db.refresh(complaint)
    return complaint
