"""Admin Content Router - videos and achievements shown on the public site"""
from fastapi import APIRouter, Depends, Query, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.database import get_session
from app.core.limits import limiter
from app.core.dependencies import require_admin
from app.admin.crud.content import (
    create_achievement,
    create_video,
    delete_content,
    list_achievements,
    list_videos,
)
from app.admin.models.content import Achievement, Video
from app.admin.schemas.content import AchievementCreate, AchievementRead, VideoCreate, VideoRead
from app.admin.services.scoping import ViewerContext, resolve_scope

router = APIRouter(prefix="/admin", tags=["Admin Content"])


@router.get("/videos", response_model=List[VideoRead])
@limiter.limit("60/minute")
async def get_videos(
    request: Request,
    center: Optional[str] = Query(None, description="'all' or a center id"),
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    return await list_videos(db, resolve_scope(viewer, center))


@router.post("/videos", response_model=VideoRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
async def add_video(
    request: Request,
    video: VideoCreate,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """Publish a video; center-bound admins publish into their own center"""
    return await create_video(db, resolve_scope(viewer), video)


@router.delete("/videos/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("20/minute")
async def remove_video(
    request: Request,
    video_id: int,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    await delete_content(db, resolve_scope(viewer), Video, video_id)


@router.get("/achievements", response_model=List[AchievementRead])
@limiter.limit("60/minute")
async def get_achievements(
    request: Request,
    center: Optional[str] = Query(None, description="'all' or a center id"),
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    return await list_achievements(db, resolve_scope(viewer, center))


@router.post("/achievements", response_model=AchievementRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
async def add_achievement(
    request: Request,
    achievement: AchievementCreate,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    return await create_achievement(db, resolve_scope(viewer), achievement)


@router.delete("/achievements/{achievement_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("20/minute")
async def remove_achievement(
    request: Request,
    achievement_id: int,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    await delete_content(db, resolve_scope(viewer), Achievement, achievement_id)
