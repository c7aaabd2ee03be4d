from app.core.database import Base
from .lesson_progress import LessonProgress
from .testimonials import Testimonial
from .enrollment_requests import EnrollmentRequest, PaymentMethod, RequestStatus
from .webhook_events import WebhookEvent

__all__ = [
    "Base",
    "LessonProgress",
    "Testimonial",
    "EnrollmentRequest",
    "PaymentMethod",
    "RequestStatus",
    "WebhookEvent",
]
