"""
Enrollment intake - the public enrollment form.

Online requests get a hosted checkout session; offline requests get a
WhatsApp hand-off link for the front desk.
"""
import logging
from urllib.parse import quote

from sqlalchemy.ext.asyncio import AsyncSession

from app.core import payment_gateway
from app.core.config import WHATSAPP_NUMBER
from app.core.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    NotFoundError,
    PaymentGatewayError,
)
from app.core.logging_utils import error_tracker, log_business_event
from app.core.validations import clean_email, clean_phone_number, require_text
from app.admin.models.centers import Center
from app.admin.models.courses import Course
from app.admin.services.notification_service import notify_staff
from app.students.crud.enrollment_requests import (
    create_enrollment_request,
    update_request_status,
)
from app.students.models.enrollment_requests import PaymentMethod, RequestStatus
from app.students.schemas.enrollment_requests import (
    EnrollmentRequestCreate,
    EnrollmentRequestResponse,
)

logger = logging.getLogger(__name__)


def build_whatsapp_message(
    name: str, phone: str, email, course_name: str, center_name: str, preferred_time
) -> str:
    return (
        "New Enrollment Request!\n\n"
        f"Name: {name}\n"
        f"Phone: {phone}\n"
        f"Email: {email or 'Not provided'}\n"
        f"Course: {course_name}\n"
        f"Center: {center_name}\n"
        "Payment Mode: Pay at Center\n"
        f"Preferred Time: {preferred_time or 'Not specified'}"
    )


def build_whatsapp_url(message: str, number: str = WHATSAPP_NUMBER) -> str:
    return f"https://wa.me/{number}?text={quote(message, safe='')}"


async def submit_enrollment_request(
    session: AsyncSession, data: EnrollmentRequestCreate
) -> EnrollmentRequestResponse:
    """
    Store the request and start the chosen payment path.

    The amount is always the course fee from the database. If the checkout
    session cannot be created the request is kept as payment_not_initiated
    and the gateway error is raised to the caller.
    """
    name = require_text(data.name, "name")
    phone = clean_phone_number(data.phone)
    email = clean_email(data.email)
    preferred_time = data.preferred_time.strip() if data.preferred_time else None

    course = await session.get(Course, data.course_id)
    if course is None:
        raise NotFoundError("Course", str(data.course_id))
    center = await session.get(Center, data.center_id)
    if center is None:
        raise NotFoundError("Center", str(data.center_id))

    # Plain values survive a later rollback
    course_id, course_name, course_full_name, amount = (
        course.id, course.name, course.full_name, course.fee
    )
    center_id, center_name = center.id, center.name

    if data.payment_method == PaymentMethod.online:
        request = await create_enrollment_request(
            session, name, phone, email, course_id, center_id, preferred_time,
            PaymentMethod.online, RequestStatus.pending_payment, amount,
        )
        request_id = request.id

        try:
            checkout = await payment_gateway.create_checkout_session(
                payment_gateway.CheckoutRequest(
                    request_id=request_id,
                    amount=amount,
                    course_id=course_id,
                    course_name=course_name,
                    center_id=center_id,
                    center_name=center_name,
                    student_name=name,
                    student_phone=phone,
                    student_email=email,
                    preferred_time=preferred_time,
                )
            )
        except (ExternalServiceError, ConfigurationError) as e:
            await update_request_status(session, request, RequestStatus.payment_not_initiated)
            error_tracker.track_error(
                "CHECKOUT_NOT_INITIATED", e.message, {"request_id": request_id}
            )
            if isinstance(e, ConfigurationError):
                raise PaymentGatewayError("Online payments are not available") from e
            raise

        await update_request_status(
            session, request, RequestStatus.pending_payment, checkout_session_id=checkout.id
        )
        log_business_event(
            "enrollment_request_submitted",
            "enrollment_request",
            request_id,
            {"payment_method": "online", "course_id": course_id, "center_id": center_id},
        )
        return EnrollmentRequestResponse(
            request_id=request_id,
            status=RequestStatus.pending_payment,
            payment_method=PaymentMethod.online,
            amount=amount,
            checkout_url=checkout.url,
            session_id=checkout.id,
        )

    request = await create_enrollment_request(
        session, name, phone, email, course_id, center_id, preferred_time,
        PaymentMethod.offline, RequestStatus.awaiting_offline_payment, amount,
    )
    request_id = request.id

    message = build_whatsapp_message(
        name, phone, email, course_full_name, center_name, preferred_time
    )
    await notify_staff(
        session,
        "new_enrollment",
        f"New Enrollment Request: {name}",
        f"Course: {course_name} | Center: {center_name} | Pay at Center | "
        f"Phone: {phone} | Email: {email or 'N/A'}",
    )

    log_business_event(
        "enrollment_request_submitted",
        "enrollment_request",
        request_id,
        {"payment_method": "offline", "course_id": course_id, "center_id": center_id},
    )
    return EnrollmentRequestResponse(
        request_id=request_id,
        status=RequestStatus.awaiting_offline_payment,
        payment_method=PaymentMethod.offline,
        amount=amount,
        whatsapp_url=build_whatsapp_url(message),
    )
