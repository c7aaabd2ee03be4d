"""Enrollment CRUD - scoped listing, lookup, creation and status changes"""
from typing import List, Optional, Tuple

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import db_operation, db_retry
from app.core.exceptions import (
    AuthorizationError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from app.core.logging_utils import log_business_event
from app.admin.models.centers import Center
from app.admin.models.courses import Course
from app.admin.models.enrollments import Enrollment, EnrollmentStatus, PaymentStatus
from app.admin.models.profiles import Profile
from app.admin.schemas.enrollments import EnrollmentCreate, EnrollmentRead
from app.admin.services.metrics import amount_due
from app.admin.services.scoping import Scope
from app.admin.services.transitions import check_status_transition


def enrollment_query():
    """Enrollment with its course, center and student profile"""
    return (
        select(Enrollment, Course, Center, Profile)
        .select_from(Enrollment)
        .join(Course, Enrollment.course_id == Course.id)
        .outerjoin(Center, Enrollment.center_id == Center.id)
        .outerjoin(Profile, Profile.user_id == Enrollment.user_id)
    )


def enrollment_to_read(
    enrollment: Enrollment,
    course: Course,
    center: Optional[Center],
    profile: Optional[Profile],
) -> EnrollmentRead:
    return EnrollmentRead(
        id=enrollment.id,
        user_id=enrollment.user_id,
        student_name=profile.full_name if profile else None,
        student_email=profile.email if profile else None,
        student_phone=profile.phone if profile else None,
        course_id=course.id,
        course_name=course.name,
        course_full_name=course.full_name,
        center_id=enrollment.center_id,
        center_name=center.name if center else None,
        enrollment_date=enrollment.enrollment_date,
        batch_timing=enrollment.batch_timing,
        status=enrollment.status,
        payment_status=enrollment.payment_status,
        fee=course.fee,
        amount_paid=enrollment.amount_paid or 0,
        amount_due=amount_due(course.fee, enrollment.amount_paid),
    )


@db_retry()
@db_operation
async def list_enrollments(
    session: AsyncSession,
    scope: Scope,
    search: Optional[str] = None,
    status: Optional[EnrollmentStatus] = None,
    skip: int = 0,
    limit: int = 50,
) -> Tuple[List[EnrollmentRead], int]:
    """Enrollments visible under the scope, newest first"""
    base_query = scope.apply(enrollment_query(), Enrollment.center_id, Enrollment.user_id)

    if status:
        base_query = base_query.where(Enrollment.status == status)

    if search:
        pattern = f"%{search.strip().lower()}%"
        base_query = base_query.where(
            or_(
                func.lower(Profile.full_name).like(pattern),
                func.lower(Profile.email).like(pattern),
                func.lower(Course.name).like(pattern),
                func.lower(Course.full_name).like(pattern),
            )
        )

    total_result = await session.execute(
        select(func.count()).select_from(base_query.subquery())
    )
    total = total_result.scalar() or 0

    result = await session.execute(
        base_query.order_by(Enrollment.enrollment_date.desc(), Enrollment.id.desc())
        .offset(skip)
        .limit(limit)
    )
    return [enrollment_to_read(*row) for row in result.all()], total


@db_operation
async def get_scoped_enrollment_row(
    session: AsyncSession, scope: Scope, enrollment_id: int
) -> Tuple[Enrollment, Course, Optional[Center], Optional[Profile]]:
    """
    Load one enrollment the viewer may see.

    Scoped viewers get the same AuthorizationError for "missing" and
    "outside scope"; only a global admin learns that an id does not exist.
    """
    result = await session.execute(
        enrollment_query().where(Enrollment.id == enrollment_id)
    )
    row = result.first()

    if row is None:
        if scope.is_global:
            raise NotFoundError("Enrollment", str(enrollment_id))
        raise AuthorizationError()

    if not scope.allows_record(row[0]):
        raise AuthorizationError()

    return tuple(row)


@db_operation
async def get_scoped_enrollment(
    session: AsyncSession, scope: Scope, enrollment_id: int
) -> Enrollment:
    enrollment, _, _, _ = await get_scoped_enrollment_row(session, scope, enrollment_id)
    return enrollment


@db_operation
async def create_enrollment(
    session: AsyncSession, scope: Scope, data: EnrollmentCreate
) -> EnrollmentRead:
    """
    Register a student in a course.

    A center-bound admin can only enroll into their own center; omitting
    the center places the enrollment there.
    """
    center_id = data.center_id
    if scope.center_id is not None:
        if center_id is None:
            center_id = scope.center_id
        elif center_id != scope.center_id:
            raise AuthorizationError()

    course = await session.get(Course, data.course_id)
    if course is None:
        raise ValidationError("Unknown course", {"course_id": data.course_id})

    if center_id is not None and await session.get(Center, center_id) is None:
        raise ValidationError("Unknown center", {"center_id": center_id})

    profile_result = await session.execute(
        select(Profile).where(Profile.user_id == data.user_id)
    )
    if profile_result.scalar_one_or_none() is None:
        raise ValidationError("Student has no profile", {"user_id": data.user_id})

    existing = await session.execute(
        select(Enrollment.id).where(
            and_(
                Enrollment.user_id == data.user_id,
                Enrollment.course_id == data.course_id,
                Enrollment.status == EnrollmentStatus.active,
            )
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise DuplicateError("Active enrollment", "course_id", str(data.course_id))

    enrollment = Enrollment(
        user_id=data.user_id,
        course_id=data.course_id,
        center_id=center_id,
        batch_timing=data.batch_timing,
        status=EnrollmentStatus.active,
        payment_status=PaymentStatus.pending,
        amount_paid=0,
    )
    if data.enrollment_date:
        enrollment.enrollment_date = data.enrollment_date

    session.add(enrollment)
    await session.commit()

    log_business_event(
        "enrollment_created",
        "enrollment",
        enrollment.id,
        {"user_id": data.user_id, "course_id": data.course_id, "center_id": center_id},
    )

    _, course, center, profile = await get_scoped_enrollment_row(session, Scope(), enrollment.id)
    return enrollment_to_read(enrollment, course, center, profile)


async def lock_enrollment(session: AsyncSession, enrollment_id: int) -> Enrollment:
    """
    Re-read the enrollment with a row lock held until the next commit.

    The instance already in the session is refreshed in place.
    """
    result = await session.execute(
        select(Enrollment)
        .where(Enrollment.id == enrollment_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    enrollment = result.scalar_one_or_none()
    if enrollment is None:
        raise NotFoundError("Enrollment", str(enrollment_id))
    return enrollment


@db_operation
async def change_enrollment_status(
    session: AsyncSession,
    enrollment: Enrollment,
    requested: EnrollmentStatus,
    changed_by: str,
) -> bool:
    """Apply a lifecycle transition; returns False when nothing changed"""
    enrollment = await lock_enrollment(session, enrollment.id)
    previous = EnrollmentStatus(enrollment.status)
    if not check_status_transition(previous, requested):
        await session.commit()
        return False

    enrollment.status = requested
    await session.commit()

    log_business_event(
        "enrollment_status_changed",
        "enrollment",
        enrollment.id,
        {"from": previous.value, "to": requested.value, "changed_by": changed_by},
    )
    return True
