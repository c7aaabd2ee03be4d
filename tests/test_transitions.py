import re
from datetime import datetime

import pytest

from app.admin.models.enrollments import EnrollmentStatus
from app.admin.services.transitions import (
    certificate_completes_enrollment,
    check_payment_allowed,
    check_progress_allowed,
    check_status_transition,
    generate_certificate_number,
    generate_receipt_number,
)
from app.core.exceptions import BusinessLogicError, InvalidStatusTransitionError

active, completed, cancelled = (
    EnrollmentStatus.active,
    EnrollmentStatus.completed,
    EnrollmentStatus.cancelled,
)


@pytest.mark.parametrize(
    "current, requested",
    [(active, completed), (active, cancelled), (cancelled, active)],
)
def test_allowed_transitions(current, requested):
    assert check_status_transition(current, requested) is True


@pytest.mark.parametrize("status", [active, completed, cancelled])
def test_same_status_is_a_no_op(status):
    assert check_status_transition(status, status) is False


@pytest.mark.parametrize(
    "current, requested",
    [(completed, active), (completed, cancelled), (cancelled, completed)],
)
def test_forbidden_transitions(current, requested):
    with pytest.raises(InvalidStatusTransitionError) as exc_info:
        check_status_transition(current, requested)
    assert exc_info.value.status_code == 409


def test_payment_needs_positive_amount():
    with pytest.raises(BusinessLogicError):
        check_payment_allowed(active, 0)
    with pytest.raises(BusinessLogicError):
        check_payment_allowed(active, -100)


def test_payment_refused_on_cancelled_enrollment():
    with pytest.raises(BusinessLogicError):
        check_payment_allowed(cancelled, 500)
    check_payment_allowed(completed, 500)


def test_certificate_rules():
    assert certificate_completes_enrollment(active) is True
    assert certificate_completes_enrollment(completed) is False
    with pytest.raises(BusinessLogicError):
        certificate_completes_enrollment(cancelled)


def test_progress_refused_on_cancelled_enrollment():
    check_progress_allowed(active)
    check_progress_allowed(completed)
    with pytest.raises(BusinessLogicError):
        check_progress_allowed(cancelled)


def test_certificate_number_format():
    number = generate_certificate_number("AMC", 2024)
    assert re.fullmatch(r"AMC-2024-[A-Z0-9]{6}", number)


def test_receipt_number_format():
    number = generate_receipt_number(datetime(2024, 3, 5, 10, 30))
    assert re.fullmatch(r"RCPT-20240305-[A-Z0-9]{6}", number)
