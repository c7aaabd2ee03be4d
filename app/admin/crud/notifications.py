from typing import List, Optional

from sqlalchemy import desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import db_operation, db_retry
from app.admin.models.notifications import Notification


@db_operation
async def create_notification(
    session: AsyncSession,
    notification_type: str,
    title: str,
    message: str,
    user_id: Optional[str] = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=notification_type,
        title=title,
        message=message,
    )
    session.add(notification)
    await session.commit()
    await session.refresh(notification)
    return notification


@db_retry()
@db_operation
async def list_notifications(
    session: AsyncSession,
    user_id: Optional[str] = None,
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 20,
) -> List[Notification]:
    """Notifications of one user, or staff notifications when user_id is None"""
    query = select(Notification)
    if user_id is None:
        query = query.where(Notification.user_id.is_(None))
    else:
        query = query.where(Notification.user_id == user_id)
    if unread_only:
        query = query.where(Notification.is_read.is_(False))

    result = await session.execute(
        query.order_by(desc(Notification.created_at), desc(Notification.id)).offset(skip).limit(limit)
    )
    return list(result.scalars().all())


@db_operation
async def get_unread_count(session: AsyncSession, user_id: Optional[str] = None) -> int:
    query = select(func.count(Notification.id)).where(Notification.is_read.is_(False))
    if user_id is None:
        query = query.where(Notification.user_id.is_(None))
    else:
        query = query.where(Notification.user_id == user_id)
    result = await session.execute(query)
    return result.scalar() or 0


@db_operation
async def mark_as_read(
    session: AsyncSession, notification_id: int, user_id: Optional[str] = None
) -> bool:
    query = update(Notification).where(Notification.id == notification_id)
    if user_id is None:
        query = query.where(Notification.user_id.is_(None))
    else:
        query = query.where(Notification.user_id == user_id)
    result = await session.execute(query.values(is_read=True))
    await session.commit()
    return result.rowcount > 0
