"""Pure aggregation helpers used by both dashboards"""
import math
from typing import Iterable, Optional

from app.admin.models.enrollments import PaymentStatus


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; percentages are shown half-up
    return int(math.floor(value + 0.5))


def completion_from_counts(completed_lessons: int, total_lessons: int) -> int:
    if not total_lessons or total_lessons <= 0:
        return 0
    return min(round_half_up(100 * completed_lessons / total_lessons), 100)


def completion_percentage(progress_rows: Iterable, total_lessons: int) -> int:
    """
    Share of the course's lessons marked completed, 0..100.

    Rows are counted by distinct lesson id, so marking a lesson twice
    changes nothing.
    """
    completed = {row.lesson_id for row in progress_rows if row.completed}
    return completion_from_counts(len(completed), total_lessons)


def attendance_percentage(attendance_rows: Iterable) -> int:
    rows = list(attendance_rows)
    if not rows:
        return 0
    present = sum(1 for row in rows if row.present)
    return round_half_up(100 * present / len(rows))


def days_attended(attendance_rows: Iterable) -> int:
    return sum(1 for row in attendance_rows if row.present)


def amount_due(fee: int, amount_paid: Optional[int]) -> int:
    """Negative when the student has overpaid"""
    return (fee or 0) - (amount_paid or 0)


def aggregate_revenue(enrollments: Iterable) -> int:
    return sum(enrollment.amount_paid or 0 for enrollment in enrollments)


def average_progress(percentages: Iterable[float]) -> float:
    values = list(percentages)
    if not values:
        return 0.0
    return sum(values) / len(values)


def derive_payment_status(amount_paid: Optional[int], fee: int) -> PaymentStatus:
    paid = amount_paid or 0
    if paid >= (fee or 0):
        return PaymentStatus.paid
    if paid > 0:
        return PaymentStatus.partial
    return PaymentStatus.pending
