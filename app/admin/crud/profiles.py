"""Profiles, roles and viewer resolution"""
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import db_operation, db_retry
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.logging_utils import log_business_event
from app.admin.models.centers import Center
from app.admin.models.profiles import Profile
from app.admin.models.user_roles import AppRole, UserRole
from app.admin.schemas.profiles import ProfileRead
from app.admin.services.scoping import Scope, ViewerContext


@db_retry()
@db_operation
async def load_viewer_context(session: AsyncSession, user_id: str) -> ViewerContext:
    """Role from user_roles (default student), home center from the profile"""
    role_result = await session.execute(
        select(UserRole.role).where(UserRole.user_id == user_id)
    )
    role = role_result.scalar_one_or_none() or AppRole.student

    center_result = await session.execute(
        select(Profile.center_id).where(Profile.user_id == user_id)
    )
    home_center_id = center_result.scalar_one_or_none()

    return ViewerContext(user_id=user_id, role=AppRole(role), home_center_id=home_center_id)


@db_operation
async def get_profile_by_user_id(session: AsyncSession, user_id: str) -> Optional[Profile]:
    result = await session.execute(select(Profile).where(Profile.user_id == user_id))
    return result.scalar_one_or_none()


def profile_to_read(profile: Profile, center: Optional[Center], role: Optional[AppRole]) -> ProfileRead:
    return ProfileRead(
        id=profile.id,
        user_id=profile.user_id,
        full_name=profile.full_name,
        email=profile.email,
        phone=profile.phone,
        center_id=profile.center_id,
        center_name=center.name if center else None,
        role=AppRole(role) if role else AppRole.student,
    )


@db_retry()
@db_operation
async def list_profiles(
    session: AsyncSession,
    scope: Scope,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 50,
) -> Tuple[List[ProfileRead], int]:
    base_query = (
        select(Profile, Center, UserRole.role)
        .select_from(Profile)
        .outerjoin(Center, Profile.center_id == Center.id)
        .outerjoin(UserRole, UserRole.user_id == Profile.user_id)
    )
    base_query = scope.apply(base_query, Profile.center_id, Profile.user_id)

    if search:
        pattern = f"%{search.strip().lower()}%"
        base_query = base_query.where(
            or_(
                func.lower(Profile.full_name).like(pattern),
                func.lower(Profile.email).like(pattern),
                Profile.phone.like(pattern),
            )
        )

    total_result = await session.execute(
        select(func.count()).select_from(base_query.subquery())
    )
    total = total_result.scalar() or 0

    result = await session.execute(
        base_query.order_by(Profile.full_name).offset(skip).limit(limit)
    )
    profiles = [profile_to_read(profile, center, role) for profile, center, role in result.all()]
    return profiles, total


async def _get_scoped_profile(session: AsyncSession, scope: Scope, profile_id: int) -> Profile:
    result = await session.execute(select(Profile).where(Profile.id == profile_id))
    profile = result.scalar_one_or_none()

    if profile is None:
        if scope.is_global:
            raise NotFoundError("Profile", str(profile_id))
        raise AuthorizationError()
    if not scope.allows_record(profile):
        raise AuthorizationError()
    return profile


@db_operation
async def update_profile_center(
    session: AsyncSession,
    viewer: ViewerContext,
    scope: Scope,
    profile_id: int,
    center_id: Optional[int],
) -> ProfileRead:
    """
    Attach a profile to a center (or detach it with None).

    Only global admins may move people between centers.
    """
    if viewer.is_center_bound:
        raise AuthorizationError()

    profile = await _get_scoped_profile(session, scope, profile_id)

    center = None
    if center_id is not None:
        center = await session.get(Center, center_id)
        if center is None:
            raise ValidationError("Unknown center", {"center_id": center_id})

    profile.center_id = center_id
    await session.commit()

    role_result = await session.execute(
        select(UserRole.role).where(UserRole.user_id == profile.user_id)
    )
    log_business_event(
        "profile_center_changed",
        "profile",
        profile.id,
        {"center_id": center_id, "changed_by": viewer.user_id},
    )
    return profile_to_read(profile, center, role_result.scalar_one_or_none())


@db_operation
async def delete_profile(
    session: AsyncSession, viewer: ViewerContext, scope: Scope, profile_id: int
) -> None:
    profile = await _get_scoped_profile(session, scope, profile_id)

    if profile.user_id == viewer.user_id:
        raise ValidationError("You cannot delete your own profile")

    user_id = profile.user_id
    await session.execute(delete(UserRole).where(UserRole.user_id == user_id))
    await session.delete(profile)
    await session.commit()

    log_business_event(
        "profile_deleted", "profile", profile_id, {"user_id": user_id, "deleted_by": viewer.user_id}
    )
