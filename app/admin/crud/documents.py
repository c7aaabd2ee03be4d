"""Receipt, statement and certificate PDFs for records the viewer may see"""
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.admin.crud.certificates import find_certificate
from app.admin.crud.enrollments import get_scoped_enrollment_row
from app.admin.crud.payments import get_scoped_payment, list_enrollment_payments
from app.admin.services.metrics import amount_due
from app.admin.services.receipts import (
    CertificateData,
    ReceiptData,
    StatementData,
    StatementLine,
    render_certificate,
    render_receipt,
    render_statement,
)
from app.admin.services.scoping import Scope


async def build_statement_pdf(
    session: AsyncSession, scope: Scope, enrollment_id: int, generated_at: Optional[datetime] = None
) -> Tuple[str, bytes]:
    enrollment, course, center, profile = await get_scoped_enrollment_row(
        session, scope, enrollment_id
    )
    payments = await list_enrollment_payments(session, enrollment.id)

    data = StatementData(
        student_name=profile.full_name if profile else "Student",
        student_email=profile.email if profile else None,
        course_name=course.name,
        course_full_name=course.full_name,
        center_name=center.name if center else None,
        enrollment_date=enrollment.enrollment_date,
        total_fee=course.fee,
        generated_at=generated_at or datetime.now(),
        payments=[
            StatementLine(
                payment_date=payment.payment_date,
                receipt_number=payment.receipt_number,
                payment_method=payment.payment_method,
                amount=payment.amount,
            )
            for payment in payments
        ],
    )
    return f"statement-{enrollment.id}.pdf", render_statement(data)


async def build_receipt_pdf(
    session: AsyncSession, scope: Scope, payment_id: int, generated_at: Optional[datetime] = None
) -> Tuple[str, bytes]:
    payment, enrollment, course, center, profile = await get_scoped_payment(
        session, scope, payment_id
    )
    receipt_number = payment.receipt_number or f"PAY-{payment.id}"

    data = ReceiptData(
        receipt_number=receipt_number,
        student_name=profile.full_name if profile else "Student",
        student_email=profile.email if profile else None,
        course_name=course.name,
        course_full_name=course.full_name,
        center_name=center.name if center else None,
        payment_date=payment.payment_date,
        amount=payment.amount,
        payment_method=payment.payment_method,
        total_fee=course.fee,
        total_paid=enrollment.amount_paid or 0,
        balance_due=amount_due(course.fee, enrollment.amount_paid),
        notes=payment.notes,
        generated_at=generated_at or datetime.now(),
    )
    return f"receipt-{receipt_number}.pdf", render_receipt(data)


async def build_certificate_pdf(
    session: AsyncSession, scope: Scope, enrollment_id: int
) -> Tuple[str, bytes]:
    enrollment, course, _, profile = await get_scoped_enrollment_row(session, scope, enrollment_id)
    certificate = await find_certificate(session, enrollment.id)
    if certificate is None:
        raise NotFoundError("Certificate", str(enrollment.id))

    data = CertificateData(
        student_name=profile.full_name if profile else "Student",
        course_name=course.full_name or course.name,
        certificate_number=certificate.certificate_number,
        issue_date=certificate.issue_date,
    )
    return f"certificate-{certificate.certificate_number}.pdf", render_certificate(data)
