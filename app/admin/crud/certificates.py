"""Certificate issuance"""
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import API_PREFIX, CERTIFICATE_PREFIX
from app.core.database import db_operation, db_retry
from app.core.exceptions import DatabaseError
from app.core.logging_utils import log_business_event
from app.admin.crud.enrollments import lock_enrollment
from app.admin.models.certificates import Certificate
from app.admin.models.courses import Course
from app.admin.models.enrollments import Enrollment, EnrollmentStatus
from app.admin.services.scoping import Scope
from app.admin.services.transitions import (
    certificate_completes_enrollment,
    generate_certificate_number,
)

NUMBER_ATTEMPTS = 3


def certificate_file_url(enrollment_id: int) -> str:
    """Where the owning student downloads the certificate PDF"""
    return f"{API_PREFIX}/students/enrollments/{enrollment_id}/certificate.pdf"


async def find_certificate(session: AsyncSession, enrollment_id: int) -> Optional[Certificate]:
    result = await session.execute(
        select(Certificate).where(Certificate.enrollment_id == enrollment_id)
    )
    return result.scalar_one_or_none()


@db_operation
async def issue_certificate(
    session: AsyncSession, enrollment: Enrollment, issued_by: str
) -> Tuple[Certificate, bool]:
    """
    Issue the enrollment's certificate.

    Returns (certificate, already_issued). A second request, including one
    that loses a race on the unique enrollment_id, gets the existing
    certificate back instead of an error. An active enrollment is moved to
    completed in the same transaction.
    """
    enrollment_id = enrollment.id
    enrollment = await lock_enrollment(session, enrollment_id)

    existing = await find_certificate(session, enrollment_id)
    if existing is not None:
        await session.commit()
        return existing, True

    completes = certificate_completes_enrollment(enrollment.status)

    for attempt in range(NUMBER_ATTEMPTS):
        certificate = Certificate(
            enrollment_id=enrollment_id,
            certificate_number=generate_certificate_number(CERTIFICATE_PREFIX),
            file_url=certificate_file_url(enrollment_id),
        )
        session.add(certificate)
        if completes:
            enrollment.status = EnrollmentStatus.completed

        try:
            await session.commit()
            break
        except IntegrityError:
            await session.rollback()
            existing = await find_certificate(session, enrollment_id)
            if existing is not None:
                return existing, True
            # Certificate number collided; lock again and draw a new one
            enrollment = await lock_enrollment(session, enrollment_id)
            completes = certificate_completes_enrollment(enrollment.status)
    else:
        raise DatabaseError("Could not allocate a unique certificate number")

    log_business_event(
        "certificate_issued",
        "certificate",
        certificate.id,
        {
            "enrollment_id": enrollment_id,
            "certificate_number": certificate.certificate_number,
            "completed_enrollment": completes,
            "issued_by": issued_by,
        },
    )
    return certificate, False


@db_retry()
@db_operation
async def list_certificates(
    session: AsyncSession, scope: Scope
) -> List[Tuple[Certificate, Enrollment, Course]]:
    query = (
        select(Certificate, Enrollment, Course)
        .join(Enrollment, Certificate.enrollment_id == Enrollment.id)
        .join(Course, Enrollment.course_id == Course.id)
    )
    query = scope.apply(query, Enrollment.center_id, Enrollment.user_id)
    result = await session.execute(query.order_by(Certificate.issue_date.desc()))
    return [tuple(row) for row in result.all()]
