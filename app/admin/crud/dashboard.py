"""Admin dashboard aggregation and the shared progress lookups"""
from collections import Counter
from typing import Dict, Iterable

from sqlalchemy import and_, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import db_operation, db_retry
from app.admin.models.courses import Course
from app.admin.models.enrollments import Enrollment, EnrollmentStatus, PaymentStatus
from app.admin.models.lessons import Lesson
from app.admin.schemas.dashboard import AdminDashboard
from app.admin.services.metrics import (
    aggregate_revenue,
    amount_due,
    average_progress,
    completion_from_counts,
)
from app.admin.services.scoping import Scope
from app.students.models.lesson_progress import LessonProgress


async def lesson_counts(session: AsyncSession, course_ids: Iterable[int]) -> Dict[int, int]:
    course_ids = list(set(course_ids))
    if not course_ids:
        return {}
    result = await session.execute(
        select(Lesson.course_id, func.count(Lesson.id))
        .where(Lesson.course_id.in_(course_ids))
        .group_by(Lesson.course_id)
    )
    return {course_id: count for course_id, count in result.all()}


async def completed_lesson_counts(
    session: AsyncSession, enrollment_ids: Iterable[int]
) -> Dict[int, int]:
    """Distinct completed lessons per enrollment"""
    enrollment_ids = list(set(enrollment_ids))
    if not enrollment_ids:
        return {}
    result = await session.execute(
        select(LessonProgress.enrollment_id, func.count(distinct(LessonProgress.lesson_id)))
        .where(
            and_(
                LessonProgress.enrollment_id.in_(enrollment_ids),
                LessonProgress.completed.is_(True),
            )
        )
        .group_by(LessonProgress.enrollment_id)
    )
    return {enrollment_id: count for enrollment_id, count in result.all()}


@db_retry()
@db_operation
async def get_admin_dashboard(session: AsyncSession, scope: Scope) -> AdminDashboard:
    query = scope.apply(
        select(Enrollment, Course.fee).join(Course, Enrollment.course_id == Course.id),
        Enrollment.center_id,
        Enrollment.user_id,
    )
    result = await session.execute(query)
    rows = result.all()
    enrollments = [enrollment for enrollment, _ in rows]

    lessons = await lesson_counts(session, (e.course_id for e in enrollments))
    completed = await completed_lesson_counts(session, (e.id for e in enrollments))

    status_counts = Counter(EnrollmentStatus(e.status) for e in enrollments)
    payment_counts = Counter(PaymentStatus(e.payment_status).value for e in enrollments)

    outstanding = sum(
        max(amount_due(fee, enrollment.amount_paid), 0)
        for enrollment, fee in rows
        if EnrollmentStatus(enrollment.status) != EnrollmentStatus.cancelled
    )

    progress = [
        completion_from_counts(completed.get(e.id, 0), lessons.get(e.course_id, 0))
        for e in enrollments
    ]

    return AdminDashboard(
        center_id=scope.center_id,
        total_students=len({e.user_id for e in enrollments}),
        total_enrollments=len(enrollments),
        active_enrollments=status_counts[EnrollmentStatus.active],
        completed_enrollments=status_counts[EnrollmentStatus.completed],
        cancelled_enrollments=status_counts[EnrollmentStatus.cancelled],
        total_revenue=aggregate_revenue(enrollments),
        outstanding_dues=outstanding,
        average_progress=round(average_progress(progress), 1),
        payment_status_counts={status.value: payment_counts.get(status.value, 0) for status in PaymentStatus},
    )
