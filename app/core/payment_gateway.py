"""
Stripe Checkout wrapper.

The SDK is synchronous, so calls run in a worker thread under an explicit
deadline.
"""
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import stripe

from app.core.config import (
    STRIPE_SECRET_KEY,
    STRIPE_WEBHOOK_SECRET,
    PAYMENT_CURRENCY,
    PUBLIC_SITE_URL,
    EXTERNAL_CALL_TIMEOUT,
)
from app.core.exceptions import (
    ConfigurationError,
    ExternalTimeoutError,
    PaymentGatewayError,
    WebhookSignatureError,
)

logger = logging.getLogger(__name__)

stripe.api_key = STRIPE_SECRET_KEY

WEBHOOK_TOLERANCE_SECONDS = 300


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    url: str


@dataclass(frozen=True)
class CheckoutRequest:
    request_id: int
    amount: int              # Whole rupees
    course_id: int
    course_name: str
    center_id: int
    center_name: str
    student_name: str
    student_phone: str
    student_email: Optional[str] = None
    preferred_time: Optional[str] = None


def build_session_params(checkout: CheckoutRequest) -> Dict[str, Any]:
    """Keyword arguments for stripe.checkout.Session.create"""
    metadata = {
        "enrollment_request_id": str(checkout.request_id),
        "student_name": checkout.student_name,
        "student_phone": checkout.student_phone,
        "student_email": checkout.student_email or "",
        "course_id": str(checkout.course_id),
        "center_id": str(checkout.center_id),
        "preferred_time": checkout.preferred_time or "",
        "course_name": checkout.course_name,
        "center_name": checkout.center_name,
    }
    params = {
        "mode": "payment",
        "line_items": [
            {
                "price_data": {
                    "currency": PAYMENT_CURRENCY,
                    "product_data": {
                        "name": f"{checkout.course_name} Course Enrollment",
                        "description": (
                            f"Enrollment at {checkout.center_name} center. "
                            f"Preferred timing: {checkout.preferred_time or 'Not specified'}"
                        ),
                    },
                    # Minor units (paise)
                    "unit_amount": checkout.amount * 100,
                },
                "quantity": 1,
            }
        ],
        "success_url": (
            f"{PUBLIC_SITE_URL}/payment-success?session_id={{CHECKOUT_SESSION_ID}}"
            f"&course={quote(checkout.course_name)}&center={quote(checkout.center_name)}"
        ),
        "cancel_url": f"{PUBLIC_SITE_URL}/?payment=cancelled",
        "metadata": metadata,
        "payment_intent_data": {
            "metadata": {
                "student_name": checkout.student_name,
                "student_phone": checkout.student_phone,
                "course_id": str(checkout.course_id),
                "center_id": str(checkout.center_id),
            }
        },
    }
    if checkout.student_email:
        params["customer_email"] = checkout.student_email
    return params


async def create_checkout_session(checkout: CheckoutRequest) -> CheckoutSession:
    """
    Raises:
        ConfigurationError: STRIPE_SECRET_KEY is not set
        ExternalTimeoutError: Stripe did not answer within EXTERNAL_CALL_TIMEOUT
        PaymentGatewayError: Stripe refused the request
    """
    if not STRIPE_SECRET_KEY:
        raise ConfigurationError("STRIPE_SECRET_KEY", "Online payments are not configured")

    params = build_session_params(checkout)
    try:
        session = await asyncio.wait_for(
            asyncio.to_thread(stripe.checkout.Session.create, **params),
            timeout=EXTERNAL_CALL_TIMEOUT,
        )
    except asyncio.TimeoutError:
        logger.error(f"Stripe timed out for enrollment request {checkout.request_id}")
        raise ExternalTimeoutError("stripe", EXTERNAL_CALL_TIMEOUT)
    except stripe.StripeError as e:
        logger.error(
            f"Stripe error for enrollment request {checkout.request_id}: {e.user_message or str(e)}",
            extra={"stripe_code": getattr(e, "code", None)},
        )
        raise PaymentGatewayError(e.user_message or "Payment gateway rejected the request")

    logger.info(f"Checkout session created: {session.id}", extra={"request_id": checkout.request_id})
    return CheckoutSession(id=session.id, url=session.url)


def verify_webhook(payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
    """
    Check the Stripe-Signature header and return the decoded event.

    Unsigned payloads are always refused.
    """
    if not STRIPE_WEBHOOK_SECRET:
        logger.error("STRIPE_WEBHOOK_SECRET is not set, refusing webhook")
        raise WebhookSignatureError("Webhook verification is not configured")
    if not signature:
        raise WebhookSignatureError("Missing Stripe-Signature header")

    try:
        body = payload.decode("utf-8")
    except UnicodeDecodeError:
        raise WebhookSignatureError("Webhook payload is not valid UTF-8")

    try:
        stripe.WebhookSignature.verify_header(
            body, signature, STRIPE_WEBHOOK_SECRET, WEBHOOK_TOLERANCE_SECONDS
        )
    except stripe.SignatureVerificationError:
        logger.warning("Webhook signature verification failed")
        raise WebhookSignatureError()

    try:
        return json.loads(body)
    except ValueError:
        raise WebhookSignatureError("Webhook payload is not valid JSON")
