"""Enrollment lifecycle rules and identifier generation"""
import secrets
import string
from datetime import datetime
from typing import Optional

from app.admin.models.enrollments import EnrollmentStatus
from app.core.exceptions import BusinessLogicError, InvalidStatusTransitionError

ALLOWED_TRANSITIONS = {
    EnrollmentStatus.active: {EnrollmentStatus.completed, EnrollmentStatus.cancelled},
    EnrollmentStatus.cancelled: {EnrollmentStatus.active},
    EnrollmentStatus.completed: set(),
}

_CODE_ALPHABET = string.ascii_uppercase + string.digits


def check_status_transition(current: EnrollmentStatus, requested: EnrollmentStatus) -> bool:
    """
    Returns True when the status must change, False for a no-op.

    Raises InvalidStatusTransitionError for anything the lifecycle forbids.
    """
    current = EnrollmentStatus(current)
    requested = EnrollmentStatus(requested)

    if current == requested:
        return False
    if requested not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransitionError(current.value, requested.value)
    return True


def check_payment_allowed(status: EnrollmentStatus, amount: int) -> None:
    if amount is None or amount <= 0:
        raise BusinessLogicError("Payment amount must be greater than zero", {"amount": amount})
    if EnrollmentStatus(status) == EnrollmentStatus.cancelled:
        raise BusinessLogicError("Cannot record a payment for a cancelled enrollment")


def check_progress_allowed(status: EnrollmentStatus) -> None:
    if EnrollmentStatus(status) == EnrollmentStatus.cancelled:
        raise BusinessLogicError("Cannot record progress for a cancelled enrollment")


def certificate_completes_enrollment(status: EnrollmentStatus) -> bool:
    """
    Whether issuing a certificate must also move the enrollment to completed.

    Completed enrollments are certified as-is, active ones are completed in
    the same transaction, cancelled ones are refused.
    """
    status = EnrollmentStatus(status)
    if status == EnrollmentStatus.cancelled:
        raise BusinessLogicError("Cannot issue a certificate for a cancelled enrollment")
    return status == EnrollmentStatus.active


def random_code(length: int = 6) -> str:
    return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(length))


def generate_certificate_number(prefix: str, year: Optional[int] = None) -> str:
    year = year or datetime.now().year
    return f"{prefix}-{year}-{random_code()}"


def generate_receipt_number(when: Optional[datetime] = None) -> str:
    when = when or datetime.now()
    return f"RCPT-{when:%Y%m%d}-{random_code()}"
