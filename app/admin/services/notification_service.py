"""
Notification Service - email + in-app notifications for students and staff.

Every dispatch stores a `notifications` row so staff can see what was
attempted, even when email delivery fails.
"""
import html
import logging
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core import email_sender
from app.core.config import INSTITUTE_NAME, RESEND_API_KEY
from app.core.exceptions import ExternalServiceError, NotFoundError
from app.core.logging_utils import error_tracker, log_business_event
from app.admin.crud.notifications import create_notification
from app.admin.crud.profiles import get_profile_by_user_id
from app.admin.models.notifications import Notification
from app.admin.schemas.notifications import NotificationType, TemplateData

logger = logging.getLogger(__name__)


def _wrap(heading: str, body: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f'<h1 style="color: #4c51bf; text-align: center;">{heading}</h1>'
        f"{body}"
        '<p style="color: #888; font-size: 14px; text-align: center; margin-top: 30px;">'
        f"Best regards,<br><strong>{html.escape(INSTITUTE_NAME)} Team</strong></p>"
        "</div>"
    )


def _get_notification_config(
    notification_type: NotificationType, data: TemplateData, student_name: str
) -> Dict[str, str]:
    """Subject, HTML body and in-app message for each notification type"""
    name = html.escape(student_name or "Student")
    course = html.escape(data.course_name or "your course")

    if notification_type == NotificationType.admission:
        return {
            "subject": f"Welcome to {INSTITUTE_NAME}! Admission Confirmed",
            "html": _wrap(
                "Welcome Aboard!",
                f"<p>Dear <strong>{name}</strong>,</p>"
                f"<p>Your admission to <strong>{course}</strong> has been confirmed.</p>"
                "<p>Open your dashboard to follow your lessons, attendance and payments.</p>",
            ),
            "message": f"Your admission to {data.course_name or 'your course'} has been confirmed.",
        }

    if notification_type == NotificationType.course_completion:
        certificate = ""
        if data.certificate_number:
            certificate = (
                '<p style="text-align: center;">Certificate Number<br>'
                f"<strong style=\"font-size: 22px;\">{html.escape(data.certificate_number)}</strong></p>"
            )
        return {
            "subject": f"Congratulations! You've Completed {data.course_name or 'Your Course'}",
            "html": _wrap(
                "Course Completed!",
                f"<p>Dear <strong>{name}</strong>,</p>"
                f"<p>Congratulations on successfully completing <strong>{course}</strong>!</p>"
                f"{certificate}"
                "<p>Your certificate is now available in your dashboard.</p>",
            ),
            "message": (
                f"You completed {data.course_name or 'your course'}."
                + (f" Certificate: {data.certificate_number}" if data.certificate_number else "")
            ),
        }

    due_date = ""
    if data.due_date:
        due_date = f"<p>Due by: {html.escape(data.due_date)}</p>"
    return {
        "subject": f"Payment Reminder - {data.course_name or 'Course Fee'}",
        "html": _wrap(
            "Payment Reminder",
            f"<p>Dear <strong>{name}</strong>,</p>"
            f"<p>This is a friendly reminder about your pending payment for <strong>{course}</strong>.</p>"
            f'<p style="text-align: center; font-size: 24px;"><strong>Amount Due: ₹{data.amount_due or 0}</strong></p>'
            f"{due_date}"
            "<p>Please complete your payment at your earliest convenience.</p>",
        ),
        "message": f"₹{data.amount_due or 0} is due for {data.course_name or 'your course'}.",
    }


async def dispatch_notification(
    session: AsyncSession,
    notification_type: NotificationType,
    user_id: str,
    data: Optional[TemplateData] = None,
) -> Tuple[Notification, bool]:
    """
    Email the student and store the in-app notification.

    Returns (notification, email_sent). Raises NotFoundError for an unknown
    profile, and re-raises the delivery error after the notification row
    has been stored.
    """
    data = data or TemplateData()
    notification_type = NotificationType(notification_type)

    profile = await get_profile_by_user_id(session, user_id)
    if profile is None:
        raise NotFoundError("Profile", user_id)

    content = _get_notification_config(
        notification_type, data, data.student_name or profile.full_name
    )

    email_sent = False
    delivery_error: Optional[ExternalServiceError] = None

    if not profile.email:
        logger.info(f"Profile {user_id} has no email, storing in-app notification only")
    elif not RESEND_API_KEY:
        logger.warning("RESEND_API_KEY is not set. Cannot send notification email.")
    else:
        try:
            await email_sender.send_email(profile.email, content["subject"], content["html"])
            email_sent = True
        except ExternalServiceError as e:
            delivery_error = e
            error_tracker.track_error(
                "NOTIFICATION_DELIVERY_FAILED",
                e.message,
                {"user_id": user_id, "type": notification_type.value},
            )

    notification = await create_notification(
        session,
        notification_type.value,
        content["subject"],
        content["message"],
        user_id=user_id,
    )

    log_business_event(
        "notification_dispatched",
        "notification",
        notification.id,
        {"type": notification_type.value, "user_id": user_id, "email_sent": email_sent},
    )

    if delivery_error is not None:
        raise delivery_error
    return notification, email_sent


async def notify_best_effort(
    session: AsyncSession,
    notification_type: NotificationType,
    user_id: str,
    data: Optional[TemplateData] = None,
) -> bool:
    """Dispatch as a side effect of another operation; failures are logged, not raised"""
    try:
        _, email_sent = await dispatch_notification(session, notification_type, user_id, data)
        return email_sent
    except (ExternalServiceError, NotFoundError) as e:
        logger.warning(
            f"Side-effect notification '{notification_type.value}' failed for {user_id}: {e.message}"
        )
        return False


async def notify_staff(
    session: AsyncSession, notification_type: str, title: str, message: str
) -> Notification:
    """In-app notification addressed to staff (no user id)"""
    return await create_notification(session, notification_type, title, message, user_id=None)


async def send_enrollment_confirmation(
    email: str, details: Dict[str, Any]
) -> bool:
    """Confirmation email after a completed online payment"""
    if not RESEND_API_KEY:
        logger.warning("RESEND_API_KEY is not set. Cannot send enrollment confirmation.")
        return False

    body = _wrap(
        "Enrollment Confirmed!",
        f"<p>Dear <strong>{html.escape(details.get('student_name') or 'Student')}</strong>,</p>"
        "<p>Your payment has been successfully processed and your enrollment is confirmed!</p>"
        f"<p><strong>Course:</strong> {html.escape(details.get('course_name') or '')}<br>"
        f"<strong>Center:</strong> {html.escape(details.get('center_name') or '')}<br>"
        f"<strong>Amount Paid:</strong> ₹{details.get('amount', 0)}<br>"
        f"<strong>Payment ID:</strong> {html.escape(details.get('payment_intent') or 'N/A')}</p>"
        "<p>Please visit our center to complete your admission formalities. "
        "Bring this email as proof of payment.</p>",
    )
    await email_sender.send_email(
        email, f"Enrollment Confirmed - {details.get('course_name') or INSTITUTE_NAME}", body
    )
    return True
