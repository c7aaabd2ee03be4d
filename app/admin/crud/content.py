"""Videos and achievements, optionally attached to a center"""
from typing import List, Optional, Type, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import db_operation, db_retry
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.logging_utils import log_business_event
from app.admin.models.centers import Center
from app.admin.models.content import Achievement, Video
from app.admin.schemas.content import AchievementCreate, VideoCreate
from app.admin.services.scoping import Scope

ContentModel = Union[Type[Video], Type[Achievement]]


@db_retry()
@db_operation
async def list_videos(
    session: AsyncSession, scope: Scope, public_only: bool = False
) -> List[Video]:
    query = scope.apply(select(Video), Video.center_id)
    if public_only:
        query = query.where(Video.is_public.is_(True))
    result = await session.execute(query.order_by(Video.order_index, Video.id))
    return list(result.scalars().all())


@db_retry()
@db_operation
async def list_achievements(
    session: AsyncSession, scope: Scope, featured_only: bool = False
) -> List[Achievement]:
    query = scope.apply(select(Achievement), Achievement.center_id)
    if featured_only:
        query = query.where(Achievement.is_featured.is_(True))
    result = await session.execute(
        query.order_by(Achievement.achievement_date.desc(), Achievement.id.desc())
    )
    return list(result.scalars().all())


async def _resolve_content_center(
    session: AsyncSession, scope: Scope, center_id: Optional[int]
) -> Optional[int]:
    # Center-bound admins publish into their own center only
    if scope.center_id is not None:
        if center_id is None:
            return scope.center_id
        if center_id != scope.center_id:
            raise AuthorizationError()
    if center_id is not None and await session.get(Center, center_id) is None:
        raise ValidationError("Unknown center", {"center_id": center_id})
    return center_id


@db_operation
async def create_video(session: AsyncSession, scope: Scope, data: VideoCreate) -> Video:
    values = data.model_dump()
    values["center_id"] = await _resolve_content_center(session, scope, data.center_id)
    video = Video(**values)
    session.add(video)
    await session.commit()
    await session.refresh(video)
    log_business_event("video_created", "video", video.id, {"center_id": video.center_id})
    return video


@db_operation
async def create_achievement(
    session: AsyncSession, scope: Scope, data: AchievementCreate
) -> Achievement:
    values = data.model_dump()
    values["center_id"] = await _resolve_content_center(session, scope, data.center_id)
    achievement = Achievement(**values)
    session.add(achievement)
    await session.commit()
    await session.refresh(achievement)
    log_business_event(
        "achievement_created", "achievement", achievement.id, {"center_id": achievement.center_id}
    )
    return achievement


@db_operation
async def delete_content(
    session: AsyncSession, scope: Scope, model: ContentModel, item_id: int
) -> None:
    item = await session.get(model, item_id)
    if item is None:
        if scope.is_global:
            raise NotFoundError(model.__name__, str(item_id))
        raise AuthorizationError()
    if not scope.allows_record(item):
        raise AuthorizationError()

    await session.delete(item)
    await session.commit()
    log_business_event(f"{model.__tablename__}_deleted", model.__tablename__, item_id)
