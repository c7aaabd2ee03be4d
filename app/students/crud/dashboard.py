"""Student dashboard - own enrollments with progress, attendance and dues"""
from collections import defaultdict
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import db_operation, db_retry
from app.admin.crud.dashboard import completed_lesson_counts, lesson_counts
from app.admin.crud.enrollments import enrollment_query
from app.admin.crud.profiles import get_profile_by_user_id
from app.admin.models.attendance import Attendance
from app.admin.models.certificates import Certificate
from app.admin.models.enrollments import Enrollment, EnrollmentStatus
from app.admin.services import metrics
from app.admin.services.scoping import Scope
from app.students.schemas.dashboard import StudentDashboard, StudentEnrollmentSummary


@db_retry()
@db_operation
async def get_student_dashboard(session: AsyncSession, scope: Scope) -> StudentDashboard:
    result = await session.execute(
        scope.apply(enrollment_query(), Enrollment.center_id, Enrollment.user_id)
        .order_by(Enrollment.enrollment_date.desc(), Enrollment.id.desc())
    )
    rows = result.all()
    enrollment_ids = [enrollment.id for enrollment, _, _, _ in rows]

    lessons = await lesson_counts(session, (course.id for _, course, _, _ in rows))
    completed = await completed_lesson_counts(session, enrollment_ids)

    attendance = defaultdict(list)
    certificates = {}
    if enrollment_ids:
        attendance_result = await session.execute(
            select(Attendance).where(Attendance.enrollment_id.in_(enrollment_ids))
        )
        for record in attendance_result.scalars().all():
            attendance[record.enrollment_id].append(record)

        certificate_result = await session.execute(
            select(Certificate).where(Certificate.enrollment_id.in_(enrollment_ids))
        )
        certificates = {c.enrollment_id: c for c in certificate_result.scalars().all()}

    summaries = []
    for enrollment, course, center, _ in rows:
        records = attendance[enrollment.id]
        total_lessons = lessons.get(course.id, 0)
        completed_lessons = completed.get(enrollment.id, 0)
        certificate = certificates.get(enrollment.id)

        summaries.append(
            StudentEnrollmentSummary(
                enrollment_id=enrollment.id,
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
                amount_due=metrics.amount_due(course.fee, enrollment.amount_paid),
                total_lessons=total_lessons,
                completed_lessons=completed_lessons,
                completion_percentage=metrics.completion_from_counts(completed_lessons, total_lessons),
                total_sessions=len(records),
                days_attended=metrics.days_attended(records),
                attendance_percentage=metrics.attendance_percentage(records),
                certificate_number=certificate.certificate_number if certificate else None,
            )
        )

    profile = await get_profile_by_user_id(session, scope.user_id)
    statuses = [EnrollmentStatus(s.status) for s in summaries]

    return StudentDashboard(
        user_id=scope.user_id,
        full_name=profile.full_name if profile else None,
        total_enrollments=len(summaries),
        active_enrollments=statuses.count(EnrollmentStatus.active),
        completed_enrollments=statuses.count(EnrollmentStatus.completed),
        certificates=len(certificates),
        average_progress=round(
            metrics.average_progress(s.completion_percentage for s in summaries), 1
        ),
        total_paid=sum(s.amount_paid for s in summaries),
        total_due=sum(max(s.amount_due, 0) for s in summaries),
        enrollments=summaries,
    )
