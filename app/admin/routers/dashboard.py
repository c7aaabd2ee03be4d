from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_session
from app.core.exceptions import AuthorizationError
from app.core.limits import limiter
from app.core.dependencies import require_admin
from app.core.logging_utils import error_tracker
from app.admin.crud.dashboard import get_admin_dashboard
from app.admin.schemas.dashboard import AdminDashboard, ErrorStats
from app.admin.services.scoping import ViewerContext, resolve_scope

router = APIRouter(prefix="/admin/dashboard", tags=["Admin Dashboard"])


def _require_global_admin(viewer: ViewerContext) -> None:
    if viewer.is_center_bound:
        raise AuthorizationError()


@router.get("", response_model=AdminDashboard)
@limiter.limit("60/minute")
async def read_admin_dashboard(
    request: Request,
    center: Optional[str] = Query(None, description="'all' or a center id"),
    viewer: ViewerContext = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """
    Enrollment, revenue and progress totals.

    Center-bound admins always get their own center, whatever `center` says.
    """
    scope = resolve_scope(viewer, center)
    return await get_admin_dashboard(db, scope)


@router.get("/errors", response_model=ErrorStats)
@limiter.limit("30/minute")
async def read_error_stats(
    request: Request,
    viewer: ViewerContext = Depends(require_admin),
):
    """Errors tracked by this process since start or the last reset (global admins)"""
    _require_global_admin(viewer)
    return error_tracker.get_stats()


@router.delete("/errors", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("10/minute")
async def reset_error_stats(
    request: Request,
    viewer: ViewerContext = Depends(require_admin),
):
    _require_global_admin(viewer)
    error_tracker.reset_stats()
