"""Stripe webhook processing"""
import logging
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BaseAppException
from app.core.logging_utils import error_tracker, log_business_event
from app.admin.services import notification_service
from app.students.crud.enrollment_requests import (
    get_request_by_session_id,
    update_request_status,
)
from app.students.crud.webhooks import claim_webhook_event
from app.students.models.enrollment_requests import RequestStatus
from app.students.schemas.enrollment_requests import WebhookAck

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


async def handle_webhook_event(session: AsyncSession, event: Dict[str, Any]) -> WebhookAck:
    """
    Apply a verified gateway event.

    Only completed checkouts have side effects. The email and the staff
    notification are best effort: their failures are logged and tracked,
    never returned to the gateway.
    """
    event_type = event.get("type", "")
    event_id = event.get("id", "")
    logger.info(f"Webhook event: {event_type}", extra={"event_id": event_id})

    if event_type != CHECKOUT_COMPLETED:
        return WebhookAck(event_type=event_type)

    checkout = (event.get("data") or {}).get("object") or {}
    session_id = checkout.get("id")
    metadata = checkout.get("metadata") or {}

    claimed = await claim_webhook_event(session, event_id, event_type, session_id)
    if not claimed:
        logger.info(f"Duplicate webhook event {event_id} ignored")
        return WebhookAck(duplicate=True, event_type=event_type)

    amount_paid = (checkout.get("amount_total") or 0) // 100
    payment_intent = checkout.get("payment_intent")
    student_name = metadata.get("student_name") or "Student"
    student_email = metadata.get("student_email")
    course_name = metadata.get("course_name") or ""
    center_name = metadata.get("center_name") or ""

    request = await get_request_by_session_id(session, session_id) if session_id else None
    request_id = request.id if request is not None else 0
    # The claim and the paid status commit together
    try:
        if request is not None:
            request.payment_intent = payment_intent
            await update_request_status(session, request, RequestStatus.paid)
        else:
            logger.warning(f"No enrollment request for checkout session {session_id}")
            await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.info(f"Webhook event {event_id} was claimed concurrently")
        return WebhookAck(duplicate=True, event_type=event_type)

    if student_email:
        try:
            await notification_service.send_enrollment_confirmation(
                student_email,
                {
                    "student_name": student_name,
                    "course_name": course_name,
                    "center_name": center_name,
                    "amount": amount_paid,
                    "payment_intent": payment_intent,
                },
            )
        except BaseAppException as e:
            logger.error(f"Failed to send confirmation email: {e.message}")
            error_tracker.track_error(
                "WEBHOOK_EMAIL_FAILED", e.message, {"event_id": event_id}
            )

    try:
        await notification_service.notify_staff(
            session,
            "new_enrollment",
            f"New Online Enrollment: {student_name}",
            f"Course: {course_name} | Center: {center_name} | Amount: ₹{amount_paid} | "
            f"Phone: {metadata.get('student_phone') or 'N/A'} | "
            f"Email: {student_email or 'N/A'} | Payment ID: {payment_intent or 'N/A'}",
        )
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Failed to create staff notification: {e}")
        error_tracker.track_error(
            "WEBHOOK_NOTIFICATION_FAILED", str(e), {"event_id": event_id}
        )

    log_business_event(
        "webhook_processed",
        "enrollment_request",
        request_id,
        {"event_id": event_id, "session_id": session_id, "amount": amount_paid},
    )
    return WebhookAck(event_type=event_type)
