from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_session
from app.core.limits import limiter
from app.core.dependencies import require_admin
from app.admin.crud.notifications import list_notifications
from app.admin.schemas.notifications import (
    DispatchResponse,
    NotificationDispatch,
    NotificationRead,
)
from app.admin.services.notification_service import dispatch_notification
from app.admin.services.scoping import ViewerContext

router = APIRouter(prefix="/admin/notifications", tags=["Admin Notifications"])


@router.get("", response_model=List[NotificationRead])
@limiter.limit("60/minute")
async def get_staff_notifications(
    request: Request,
    unread_only: bool = Query(False),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """Staff inbox: new enrollment requests and completed online payments"""
    return await list_notifications(
        db, user_id=None, unread_only=unread_only, skip=(page - 1) * size, limit=size
    )


@router.post("/dispatch", response_model=DispatchResponse)
@limiter.limit("10/minute")
async def dispatch(
    request: Request,
    payload: NotificationDispatch,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """
    Send an admission, course completion or payment reminder email.

    The in-app notification is stored even when delivery fails; the failure
    is then returned as 502/504.
    """
    notification, email_sent = await dispatch_notification(
        db, payload.type, payload.user_id, payload.data
    )
    return DispatchResponse(
        notification=NotificationRead.model_validate(notification), email_sent=email_sent
    )
