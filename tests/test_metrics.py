from types import SimpleNamespace

import pytest

from app.admin.models.enrollments import PaymentStatus
from app.admin.services import metrics


def progress(lesson_id, completed=True):
    return SimpleNamespace(lesson_id=lesson_id, completed=completed)


def attendance(present):
    return SimpleNamespace(present=present)


def test_round_half_up():
    assert metrics.round_half_up(2.5) == 3
    assert metrics.round_half_up(3.5) == 4
    assert metrics.round_half_up(66.66) == 67
    assert metrics.round_half_up(33.33) == 33


def test_completion_is_zero_without_lessons():
    assert metrics.completion_percentage([progress(1)], 0) == 0


def test_completion_counts_each_lesson_once():
    rows = [progress(1), progress(1), progress(2), progress(3, completed=False)]
    assert metrics.completion_percentage(rows, 4) == 50


def test_completion_caps_at_one_hundred():
    rows = [progress(i) for i in range(1, 6)]
    assert metrics.completion_percentage(rows, 4) == 100


def test_completion_is_monotone():
    values = [
        metrics.completion_percentage([progress(i) for i in range(1, done + 1)], 7)
        for done in range(8)
    ]
    assert values == sorted(values)
    assert values[0] == 0
    assert values[-1] == 100


def test_attendance_seven_of_ten():
    rows = [attendance(True)] * 7 + [attendance(False)] * 3
    assert metrics.attendance_percentage(rows) == 70
    assert metrics.days_attended(rows) == 7


def test_attendance_without_records():
    assert metrics.attendance_percentage([]) == 0
    assert metrics.days_attended([]) == 0


def test_amount_due_is_not_clamped():
    assert metrics.amount_due(6000, 6000) == 0
    assert metrics.amount_due(8000, 3000) == 5000
    assert metrics.amount_due(6000, 6500) == -500
    assert metrics.amount_due(6000, None) == 6000


def test_revenue_and_average_progress():
    enrollments = [SimpleNamespace(amount_paid=3000), SimpleNamespace(amount_paid=None)]
    assert metrics.aggregate_revenue(enrollments) == 3000
    assert metrics.average_progress([]) == 0.0
    assert metrics.average_progress([50, 100, 0]) == 50.0


@pytest.mark.parametrize(
    "paid, fee, expected",
    [
        (0, 6000, PaymentStatus.pending),
        (3000, 8000, PaymentStatus.partial),
        (6000, 6000, PaymentStatus.paid),
        (7000, 6000, PaymentStatus.paid),
    ],
)
def test_derive_payment_status(paid, fee, expected):
    assert metrics.derive_payment_status(paid, fee) == expected
