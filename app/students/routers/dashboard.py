"""Student Router - own dashboard, enrollments, lessons and documents"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.database import get_session
from app.core.limits import limiter
from app.core.dependencies import get_current_viewer
from app.core.responses import pdf_response
from app.admin.crud.attendance import list_attendance
from app.admin.crud.certificates import list_certificates
from app.admin.crud.documents import (
    build_certificate_pdf,
    build_receipt_pdf,
    build_statement_pdf,
)
from app.admin.crud.enrollments import get_scoped_enrollment
from app.admin.schemas.attendance import AttendanceRead, AttendanceSummary
from app.admin.services import metrics
from app.admin.services.scoping import ViewerContext, resolve_scope
from app.students.crud.dashboard import get_student_dashboard
from app.students.crud.progress import complete_lesson, get_course_progress
from app.students.schemas.dashboard import (
    StudentCertificate,
    StudentDashboard,
    StudentEnrollmentSummary,
)
from app.students.schemas.progress import CourseProgress

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("/dashboard", response_model=StudentDashboard)
@limiter.limit("60/minute")
async def read_my_dashboard(
    request: Request,
    center: Optional[str] = Query(None, description="'all' or a center id"),
    viewer: ViewerContext = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_session),
):
    """
    The caller's own learning summary.

    Always limited to the caller's enrollments, admins included.
    """
    scope = resolve_scope(viewer, center, own_records=True)
    return await get_student_dashboard(db, scope)


@router.get("/enrollments", response_model=List[StudentEnrollmentSummary])
@limiter.limit("60/minute")
async def read_my_enrollments(
    request: Request,
    center: Optional[str] = Query(None, description="'all' or a center id"),
    viewer: ViewerContext = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_session),
):
    scope = resolve_scope(viewer, center, own_records=True)
    dashboard = await get_student_dashboard(db, scope)
    return dashboard.enrollments


@router.get("/enrollments/{enrollment_id}/attendance", response_model=AttendanceSummary)
@limiter.limit("60/minute")
async def read_my_attendance(
    request: Request,
    enrollment_id: int,
    viewer: ViewerContext = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_session),
):
    scope = resolve_scope(viewer, own_records=True)
    enrollment = await get_scoped_enrollment(db, scope, enrollment_id)
    records = await list_attendance(db, enrollment.id)
    return AttendanceSummary(
        enrollment_id=enrollment.id,
        total_sessions=len(records),
        days_present=metrics.days_attended(records),
        attendance_percentage=metrics.attendance_percentage(records),
        records=[AttendanceRead.model_validate(record) for record in records],
    )


@router.get("/enrollments/{enrollment_id}/lessons", response_model=CourseProgress)
@limiter.limit("60/minute")
async def read_my_lessons(
    request: Request,
    enrollment_id: int,
    viewer: ViewerContext = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_session),
):
    """Lessons of the enrolled course with the caller's completion marks"""
    scope = resolve_scope(viewer, own_records=True)
    enrollment = await get_scoped_enrollment(db, scope, enrollment_id)
    return await get_course_progress(db, enrollment)


@router.post(
    "/enrollments/{enrollment_id}/lessons/{lesson_id}/complete",
    response_model=CourseProgress,
)
@limiter.limit("60/minute")
async def complete_my_lesson(
    request: Request,
    enrollment_id: int,
    lesson_id: int,
    viewer: ViewerContext = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_session),
):
    """
    Mark a lesson as done.

    Repeating the call changes nothing; the course progress is returned
    either way.
    """
    scope = resolve_scope(viewer, own_records=True)
    enrollment = await get_scoped_enrollment(db, scope, enrollment_id)
    await complete_lesson(db, enrollment, lesson_id)
    enrollment = await get_scoped_enrollment(db, scope, enrollment_id)
    return await get_course_progress(db, enrollment)


@router.get("/certificates", response_model=List[StudentCertificate])
@limiter.limit("60/minute")
async def read_my_certificates(
    request: Request,
    viewer: ViewerContext = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_session),
):
    rows = await list_certificates(db, resolve_scope(viewer, own_records=True))
    return [
        StudentCertificate(
            enrollment_id=certificate.enrollment_id,
            certificate_number=certificate.certificate_number,
            issue_date=certificate.issue_date,
            course_name=course.name,
            course_full_name=course.full_name,
            file_url=certificate.file_url,
        )
        for certificate, _, course in rows
    ]


@router.get("/enrollments/{enrollment_id}/statement.pdf")
@limiter.limit("20/minute")
async def download_my_statement(
    request: Request,
    enrollment_id: int,
    viewer: ViewerContext = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_session),
):
    scope = resolve_scope(viewer, own_records=True)
    filename, content = await build_statement_pdf(db, scope, enrollment_id)
    return pdf_response(filename, content)


@router.get("/enrollments/{enrollment_id}/certificate.pdf")
@limiter.limit("20/minute")
async def download_my_certificate(
    request: Request,
    enrollment_id: int,
    viewer: ViewerContext = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_session),
):
    scope = resolve_scope(viewer, own_records=True)
    filename, content = await build_certificate_pdf(db, scope, enrollment_id)
    return pdf_response(filename, content)


@router.get("/payments/{payment_id}/receipt.pdf")
@limiter.limit("20/minute")
async def download_my_receipt(
    request: Request,
    payment_id: int,
    viewer: ViewerContext = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_session),
):
    scope = resolve_scope(viewer, own_records=True)
    filename, content = await build_receipt_pdf(db, scope, payment_id)
    return pdf_response(filename, content)
