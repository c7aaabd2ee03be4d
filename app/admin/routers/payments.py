from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_session
from app.core.limits import limiter
from app.core.dependencies import require_admin
from app.core.responses import pdf_response
from app.admin.crud.documents import build_receipt_pdf
from app.admin.crud.payments import list_payments
from app.admin.schemas.payments import PaymentLedgerResponse
from app.admin.services.scoping import ViewerContext, resolve_scope

router = APIRouter(prefix="/admin/payments", tags=["Admin Payments"])


@router.get("", response_model=PaymentLedgerResponse)
@limiter.limit("60/minute")
async def get_payments(
    request: Request,
    center: Optional[str] = Query(None, description="'all' or a center id"),
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """All payments in scope, newest first, with the scope's total amount"""
    scope = resolve_scope(viewer, center)
    rows, total, total_amount = await list_payments(db, scope, (page - 1) * size, size)
    return PaymentLedgerResponse(payments=rows, total=total, total_amount=total_amount)


@router.get("/{payment_id}/receipt.pdf")
@limiter.limit("20/minute")
async def download_receipt(
    request: Request,
    payment_id: int,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    filename, content = await build_receipt_pdf(db, resolve_scope(viewer), payment_id)
    return pdf_response(filename, content)
