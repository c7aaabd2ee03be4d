"""Enrollment form submissions"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import db_operation
from app.students.models.enrollment_requests import (
    EnrollmentRequest,
    PaymentMethod,
    RequestStatus,
)


@db_operation
async def create_enrollment_request(
    session: AsyncSession,
    name: str,
    phone: str,
    email: Optional[str],
    course_id: int,
    center_id: int,
    preferred_time: Optional[str],
    payment_method: PaymentMethod,
    status: RequestStatus,
    amount: int,
) -> EnrollmentRequest:
    request = EnrollmentRequest(
        name=name,
        phone=phone,
        email=email,
        course_id=course_id,
        center_id=center_id,
        preferred_time=preferred_time,
        payment_method=payment_method,
        status=status,
        amount=amount,
    )
    session.add(request)
    await session.commit()
    await session.refresh(request)
    return request


@db_operation
async def update_request_status(
    session: AsyncSession,
    request: EnrollmentRequest,
    status: RequestStatus,
    checkout_session_id: Optional[str] = None,
) -> EnrollmentRequest:
    request.status = status
    if checkout_session_id:
        request.checkout_session_id = checkout_session_id
    await session.commit()
    return request


@db_operation
async def get_request_by_session_id(
    session: AsyncSession, checkout_session_id: str
) -> Optional[EnrollmentRequest]:
    result = await session.execute(
        select(EnrollmentRequest).where(
            EnrollmentRequest.checkout_session_id == checkout_session_id
        )
    )
    return result.scalar_one_or_none()
