from fastapi import APIRouter, Depends, Query, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_session
from app.core.limits import limiter
from app.core.dependencies import require_admin
from app.admin.crud.profiles import delete_profile, list_profiles, update_profile_center
from app.admin.schemas.profiles import ProfileCenterUpdate, ProfileListResponse, ProfileRead
from app.admin.services.scoping import ViewerContext, resolve_scope

router = APIRouter(prefix="/admin/profiles", tags=["Admin Profiles"])


@router.get("", response_model=ProfileListResponse)
@limiter.limit("60/minute")
async def get_profiles(
    request: Request,
    center: Optional[str] = Query(None, description="'all' or a center id"),
    search: Optional[str] = Query(None, description="Name, email or phone"),
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    scope = resolve_scope(viewer, center)
    profiles, total = await list_profiles(db, scope, search, (page - 1) * size, size)
    return ProfileListResponse(profiles=profiles, total=total)


@router.patch("/{profile_id}/center", response_model=ProfileRead)
@limiter.limit("20/minute")
async def change_profile_center(
    request: Request,
    profile_id: int,
    update: ProfileCenterUpdate,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """
    Assign a profile to a center, or clear it with `center_id: null`.

    Global admins only.
    """
    return await update_profile_center(
        db, viewer, resolve_scope(viewer), profile_id, update.center_id
    )


@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("10/minute")
async def remove_profile(
    request: Request,
    profile_id: int,
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """Delete a profile and its role. Admins cannot delete themselves."""
    await delete_profile(db, viewer, resolve_scope(viewer), profile_id)
