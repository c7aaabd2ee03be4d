"""Student Schemas Package"""
from .dashboard import StudentEnrollmentSummary, StudentDashboard, StudentCertificate
from .progress import LessonProgressRead, CourseProgress
from .catalog import TestimonialRead
from .enrollment_requests import (
    EnrollmentRequestCreate,
    EnrollmentRequestResponse,
    WebhookAck,
)

__all__ = [
    "StudentEnrollmentSummary",
    "StudentDashboard",
    "StudentCertificate",
    "LessonProgressRead",
    "CourseProgress",
    "TestimonialRead",
    "EnrollmentRequestCreate",
    "EnrollmentRequestResponse",
    "WebhookAck",
]
