"""Payment ledger CRUD"""
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import TransactionManager, db_operation, db_retry
from app.core.exceptions import AuthorizationError, NotFoundError
from app.core.logging_utils import log_business_event
from app.admin.models.centers import Center
from app.admin.models.courses import Course
from app.admin.models.enrollments import Enrollment
from app.admin.models.payments import PaymentHistory
from app.admin.models.profiles import Profile
from app.admin.schemas.payments import PaymentCreate, PaymentLedgerRow, PaymentRead
from app.admin.services.metrics import derive_payment_status
from app.admin.services.scoping import Scope
from app.admin.services.transitions import check_payment_allowed, generate_receipt_number


@db_operation
async def record_payment(
    session: AsyncSession,
    scope: Scope,
    enrollment_id: int,
    data: PaymentCreate,
    recorded_by: str,
) -> Tuple[PaymentHistory, Enrollment]:
    """
    Append a payment and recompute the enrollment totals atomically.

    The enrollment row is locked for the whole transaction, amount_paid is
    re-summed from the ledger (never incremented), and payment_status is
    derived from that sum.
    """
    async with TransactionManager(session):
        result = await session.execute(
            select(Enrollment)
            .where(Enrollment.id == enrollment_id)
            .with_for_update()
        )
        enrollment = result.scalar_one_or_none()

        if enrollment is None:
            if scope.is_global:
                raise NotFoundError("Enrollment", str(enrollment_id))
            raise AuthorizationError()
        if not scope.allows_record(enrollment):
            raise AuthorizationError()

        check_payment_allowed(enrollment.status, data.amount)

        fee_result = await session.execute(
            select(Course.fee).where(Course.id == enrollment.course_id)
        )
        fee = fee_result.scalar_one()

        payment_date = data.payment_date or datetime.now(timezone.utc)
        payment = PaymentHistory(
            enrollment_id=enrollment.id,
            amount=data.amount,
            payment_date=payment_date,
            payment_method=data.payment_method,
            receipt_number=data.receipt_number or generate_receipt_number(payment_date),
            notes=data.notes,
        )
        session.add(payment)
        await session.flush()

        total_result = await session.execute(
            select(func.coalesce(func.sum(PaymentHistory.amount), 0)).where(
                PaymentHistory.enrollment_id == enrollment.id
            )
        )
        enrollment.amount_paid = int(total_result.scalar() or 0)
        enrollment.payment_status = derive_payment_status(enrollment.amount_paid, fee)

    log_business_event(
        "payment_recorded",
        "payment",
        payment.id,
        {
            "enrollment_id": enrollment.id,
            "amount": payment.amount,
            "amount_paid": enrollment.amount_paid,
            "payment_status": enrollment.payment_status.value,
            "recorded_by": recorded_by,
        },
    )
    return payment, enrollment


@db_retry()
@db_operation
async def list_enrollment_payments(
    session: AsyncSession, enrollment_id: int
) -> List[PaymentHistory]:
    result = await session.execute(
        select(PaymentHistory)
        .where(PaymentHistory.enrollment_id == enrollment_id)
        .order_by(PaymentHistory.payment_date, PaymentHistory.id)
    )
    return list(result.scalars().all())


def _ledger_query():
    return (
        select(PaymentHistory, Enrollment, Course, Center, Profile)
        .select_from(PaymentHistory)
        .join(Enrollment, PaymentHistory.enrollment_id == Enrollment.id)
        .join(Course, Enrollment.course_id == Course.id)
        .outerjoin(Center, Enrollment.center_id == Center.id)
        .outerjoin(Profile, Profile.user_id == Enrollment.user_id)
    )


@db_retry()
@db_operation
async def list_payments(
    session: AsyncSession, scope: Scope, skip: int = 0, limit: int = 50
) -> Tuple[List[PaymentLedgerRow], int, int]:
    """Ledger rows visible under the scope (scoped through their enrollment)"""
    base_query = scope.apply(_ledger_query(), Enrollment.center_id, Enrollment.user_id)

    ledger = base_query.subquery()
    totals_result = await session.execute(
        select(func.count(), func.coalesce(func.sum(ledger.c.amount), 0)).select_from(ledger)
    )
    total, total_amount = totals_result.one()

    result = await session.execute(
        base_query.order_by(PaymentHistory.payment_date.desc(), PaymentHistory.id.desc())
        .offset(skip)
        .limit(limit)
    )

    rows = []
    for payment, enrollment, course, center, profile in result.all():
        rows.append(
            PaymentLedgerRow(
                **PaymentRead.model_validate(payment).model_dump(),
                student_name=profile.full_name if profile else None,
                course_name=course.name,
                center_id=enrollment.center_id,
                center_name=center.name if center else None,
            )
        )
    return rows, int(total or 0), int(total_amount or 0)


@db_operation
async def get_scoped_payment(
    session: AsyncSession, scope: Scope, payment_id: int
) -> Tuple[PaymentHistory, Enrollment, Course, Optional[Center], Optional[Profile]]:
    result = await session.execute(_ledger_query().where(PaymentHistory.id == payment_id))
    row = result.first()

    if row is None:
        if scope.is_global:
            raise NotFoundError("Payment", str(payment_id))
        raise AuthorizationError()

    if not scope.allows_record(row[1]):
        raise AuthorizationError()

    return tuple(row)
