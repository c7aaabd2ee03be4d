from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import db_operation
from app.students.models.webhook_events import WebhookEvent


@db_operation
async def claim_webhook_event(
    session: AsyncSession, event_id: str, event_type: str, session_id: Optional[str]
) -> bool:
    """
    Stage the event as processed. False means it (or another event for
    the same checkout session) was handled before.

    Not committed here; the claim commits with the caller's changes.
    """
    conditions = [WebhookEvent.event_id == event_id]
    if session_id:
        conditions.append(WebhookEvent.session_id == session_id)
    existing = await session.execute(select(WebhookEvent.id).where(or_(*conditions)))
    if existing.first() is not None:
        return False

    session.add(WebhookEvent(event_id=event_id, event_type=event_type, session_id=session_id))
    return True
