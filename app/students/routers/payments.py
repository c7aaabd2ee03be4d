from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_session
from app.core.limits import limiter
from app.core.payment_gateway import verify_webhook
from app.students.schemas.enrollment_requests import WebhookAck
from app.students.services.webhook_handler import handle_webhook_event

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/webhook", response_model=WebhookAck)
@limiter.limit("120/minute")
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    db: AsyncSession = Depends(get_session),
):
    """
    Stripe event endpoint.

    The raw body must carry a valid Stripe-Signature; anything else is
    rejected with 400. Redelivered events are acknowledged with
    `duplicate: true` and have no further effect.
    """
    payload = await request.body()
    event = verify_webhook(payload, stripe_signature)
    return await handle_webhook_event(db, event)
