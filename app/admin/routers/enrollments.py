"""Admin Enrollments Router - enrollment lifecycle, payments, attendance, certificates"""
import math
from fastapi import APIRouter, Depends, Query, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.database import get_session
from app.core.limits import limiter
from app.core.dependencies import require_admin
from app.core.exceptions import BusinessLogicError
from app.core.responses import pdf_response
from app.admin.crud.attendance import mark_attendance
from app.admin.crud.certificates import issue_certificate
from app.admin.crud.documents import build_certificate_pdf, build_statement_pdf
from app.admin.crud.enrollments import (
    change_enrollment_status,
    create_enrollment,
    enrollment_to_read,
    get_scoped_enrollment,
    get_scoped_enrollment_row,
    list_enrollments,
)
from app.admin.crud.payments import list_enrollment_payments, record_payment
from app.admin.models.enrollments import EnrollmentStatus
from app.admin.schemas.attendance import AttendanceMark, AttendanceRead
from app.admin.schemas.certificates import CertificateIssueResponse, CertificateRead
from app.admin.schemas.enrollments import (
    EnrollmentCreate,
    EnrollmentListResponse,
    EnrollmentRead,
    EnrollmentStatusUpdate,
    StatusChangeResponse,
)
from app.admin.schemas.notifications import (
    DispatchResponse,
    NotificationRead,
    NotificationType,
    PaymentReminderRequest,
    TemplateData,
)
from app.admin.schemas.payments import PaymentCreate, PaymentRead, PaymentRecordedResponse
from app.admin.services.metrics import amount_due
from app.admin.services.notification_service import dispatch_notification, notify_best_effort
from app.admin.services.scoping import ViewerContext, resolve_scope

router = APIRouter(prefix="/admin/enrollments", tags=["Admin Enrollments"])


@router.get("", response_model=EnrollmentListResponse)
@limiter.limit("60/minute")
async def get_enrollments(
    request: Request,
    center: Optional[str] = Query(None, description="'all' or a center id"),
    search: Optional[str] = Query(None, description="Student name, email, phone or course"),
    status_filter: Optional[EnrollmentStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(50, ge=1, le=200, description="Items per page"),
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """
    List enrollments visible to the admin.

    - **center**: narrows a global admin's view; ignored for center-bound admins
    - **search**: case-insensitive match on student and course
    - **status**: active, completed or cancelled
    """
    scope = resolve_scope(viewer, center)
    skip = (page - 1) * size
    enrollments, total = await list_enrollments(db, scope, search, status_filter, skip, size)

    pages = math.ceil(total / size) if total > 0 else 1

    return EnrollmentListResponse(
        enrollments=enrollments, total=total, page=page, size=size, pages=pages
    )


@router.post("", response_model=EnrollmentRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
async def create_new_enrollment(
    request: Request,
    enrollment: EnrollmentCreate,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """
    Enroll a student in a course.

    Sends the admission email unless `send_admission_email` is false.
    A failed email does not undo the enrollment.
    """
    scope = resolve_scope(viewer)
    created = await create_enrollment(db, scope, enrollment)

    if enrollment.send_admission_email:
        await notify_best_effort(
            db,
            NotificationType.admission,
            created.user_id,
            TemplateData(course_name=created.course_full_name, student_name=created.student_name),
        )
    return created


@router.patch("/{enrollment_id}/status", response_model=StatusChangeResponse)
@limiter.limit("30/minute")
async def update_enrollment_status(
    request: Request,
    enrollment_id: int,
    update: EnrollmentStatusUpdate,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """
    Move an enrollment through its lifecycle.

    active -> completed | cancelled, cancelled -> active. Completed is final.
    Requesting the current status is a no-op (`changed: false`).
    """
    scope = resolve_scope(viewer)
    enrollment, course, center, profile = await get_scoped_enrollment_row(
        db, scope, enrollment_id
    )
    changed = await change_enrollment_status(db, enrollment, update.status, viewer.user_id)
    return StatusChangeResponse(
        enrollment=enrollment_to_read(enrollment, course, center, profile), changed=changed
    )


@router.get("/{enrollment_id}/payments", response_model=List[PaymentRead])
@limiter.limit("60/minute")
async def get_enrollment_payments(
    request: Request,
    enrollment_id: int,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """Payment ledger of one enrollment, newest first"""
    enrollment = await get_scoped_enrollment(db, resolve_scope(viewer), enrollment_id)
    return await list_enrollment_payments(db, enrollment.id)


@router.post(
    "/{enrollment_id}/payments",
    response_model=PaymentRecordedResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("20/minute")
async def add_enrollment_payment(
    request: Request,
    enrollment_id: int,
    payment: PaymentCreate,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """
    Record a payment.

    The enrollment's amount paid is recomputed from the whole ledger and
    its payment status derived from it. A receipt number is generated when
    none is given.
    """
    scope = resolve_scope(viewer)
    recorded, _ = await record_payment(db, scope, enrollment_id, payment, viewer.user_id)
    row = await get_scoped_enrollment_row(db, scope, enrollment_id)
    return PaymentRecordedResponse(
        payment=PaymentRead.model_validate(recorded), enrollment=enrollment_to_read(*row)
    )


@router.put("/{enrollment_id}/attendance", response_model=AttendanceRead)
@limiter.limit("60/minute")
async def put_attendance(
    request: Request,
    enrollment_id: int,
    attendance: AttendanceMark,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """Mark present/absent for one session date; marking the same date again updates it"""
    enrollment = await get_scoped_enrollment(db, resolve_scope(viewer), enrollment_id)
    return await mark_attendance(db, enrollment, attendance, viewer.user_id)


@router.post("/{enrollment_id}/certificate", response_model=CertificateIssueResponse)
@limiter.limit("10/minute")
async def post_certificate(
    request: Request,
    enrollment_id: int,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """
    Issue the course certificate.

    An active enrollment is completed at the same time; cancelled ones are
    refused. Asking again returns the existing certificate with
    `already_issued: true`.
    """
    enrollment, course, _, profile = await get_scoped_enrollment_row(
        db, resolve_scope(viewer), enrollment_id
    )
    user_id = enrollment.user_id
    course_name = course.full_name
    student_name = profile.full_name if profile else None

    certificate, already_issued = await issue_certificate(db, enrollment, viewer.user_id)
    certificate_read = CertificateRead.model_validate(certificate)

    if already_issued:
        return CertificateIssueResponse(
            certificate=certificate_read,
            already_issued=True,
            message="Certificate already issued",
        )

    await notify_best_effort(
        db,
        NotificationType.course_completion,
        user_id,
        TemplateData(
            course_name=course_name,
            student_name=student_name,
            certificate_number=certificate_read.certificate_number,
        ),
    )
    return CertificateIssueResponse(
        certificate=certificate_read,
        already_issued=False,
        message=f"Certificate {certificate_read.certificate_number} issued",
    )


@router.post("/{enrollment_id}/payment-reminder", response_model=DispatchResponse)
@limiter.limit("10/minute")
async def send_payment_reminder(
    request: Request,
    enrollment_id: int,
    reminder: PaymentReminderRequest,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """Email the student the balance still due on this enrollment"""
    enrollment, course, _, profile = await get_scoped_enrollment_row(
        db, resolve_scope(viewer), enrollment_id
    )
    due = amount_due(course.fee, enrollment.amount_paid)
    if due <= 0:
        raise BusinessLogicError("Nothing is due on this enrollment", {"amount_due": due})

    notification, email_sent = await dispatch_notification(
        db,
        NotificationType.payment_reminder,
        enrollment.user_id,
        TemplateData(
            course_name=course.full_name,
            student_name=profile.full_name if profile else None,
            amount_due=due,
            due_date=reminder.due_date,
        ),
    )
    return DispatchResponse(
        notification=NotificationRead.model_validate(notification), email_sent=email_sent
    )


@router.get("/{enrollment_id}/statement.pdf")
@limiter.limit("20/minute")
async def download_statement(
    request: Request,
    enrollment_id: int,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """Fee statement with every payment of the enrollment"""
    filename, content = await build_statement_pdf(db, resolve_scope(viewer), enrollment_id)
    return pdf_response(filename, content)


@router.get("/{enrollment_id}/certificate.pdf")
@limiter.limit("20/minute")
async def download_certificate(
    request: Request,
    enrollment_id: int,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """Completion certificate; 404 until one has been issued"""
    filename, content = await build_certificate_pdf(db, resolve_scope(viewer), enrollment_id)
    return pdf_response(filename, content)
