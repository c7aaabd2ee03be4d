from fastapi import APIRouter, Depends, status, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.limits import limiter
from app.students.schemas.enrollment_requests import (
    EnrollmentRequestCreate,
    EnrollmentRequestResponse,
)
from app.students.services.enrollment_intake import submit_enrollment_request

router = APIRouter(prefix="/enrollment-requests", tags=["Enrollment Requests"])


@router.post("", response_model=EnrollmentRequestResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
async def create_enrollment_request(
    request: Request,
    enrollment_request: EnrollmentRequestCreate,
    db: AsyncSession = Depends(get_session),
):
    """
    Public enrollment form.

    - **payment_method=online**: returns `checkout_url` and `session_id` of a
      hosted checkout for the course fee
    - **payment_method=offline**: returns `whatsapp_url` to confirm with the
      front desk; the fee is paid at the center

    Phone numbers must have exactly 10 digits (spaces and dashes allowed).
    """
    return await submit_enrollment_request(db, enrollment_request)
