"""Public catalog - no authentication"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.database import get_session
from app.core.limits import limiter
from app.admin.crud.content import list_achievements, list_videos
from app.admin.schemas.catalog import CenterRead, CourseRead
from app.admin.schemas.content import AchievementRead, VideoRead
from app.admin.services.scoping import Scope, parse_center_selection
from app.students.crud.catalog import list_centers, list_courses, list_published_testimonials
from app.students.schemas.catalog import TestimonialRead

router = APIRouter(prefix="/catalog", tags=["Catalog"])


@router.get("/centers", response_model=List[CenterRead])
@limiter.limit("120/minute")
async def get_centers(request: Request, db: AsyncSession = Depends(get_session)):
    return await list_centers(db)


@router.get("/courses", response_model=List[CourseRead])
@limiter.limit("120/minute")
async def get_courses(request: Request, db: AsyncSession = Depends(get_session)):
    return await list_courses(db)


@router.get("/testimonials", response_model=List[TestimonialRead])
@limiter.limit("120/minute")
async def get_testimonials(
    request: Request,
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
):
    return await list_published_testimonials(db, limit)


@router.get("/videos", response_model=List[VideoRead])
@limiter.limit("120/minute")
async def get_public_videos(
    request: Request,
    center: Optional[str] = Query(None, description="'all' or a center id"),
    db: AsyncSession = Depends(get_session),
):
    """Public videos; a center filter hides videos not tied to that center"""
    scope = Scope(center_id=parse_center_selection(center))
    return await list_videos(db, scope, public_only=True)


@router.get("/achievements", response_model=List[AchievementRead])
@limiter.limit("120/minute")
async def get_public_achievements(
    request: Request,
    center: Optional[str] = Query(None, description="'all' or a center id"),
    featured_only: bool = Query(False),
    db: AsyncSession = Depends(get_session),
):
    scope = Scope(center_id=parse_center_selection(center))
    return await list_achievements(db, scope, featured_only=featured_only)
