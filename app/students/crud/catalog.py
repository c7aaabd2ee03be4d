"""Public catalog reads"""
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import db_operation, db_retry
from app.admin.models.centers import Center
from app.admin.models.courses import Course
from app.admin.models.profiles import Profile
from app.students.models.testimonials import Testimonial
from app.students.schemas.catalog import TestimonialRead


@db_retry()
@db_operation
async def list_centers(session: AsyncSession) -> List[Center]:
    result = await session.execute(select(Center).order_by(Center.name))
    return list(result.scalars().all())


@db_retry()
@db_operation
async def list_courses(session: AsyncSession) -> List[Course]:
    result = await session.execute(
        select(Course).order_by(Course.is_popular.desc(), Course.name)
    )
    return list(result.scalars().all())


@db_retry()
@db_operation
async def list_published_testimonials(
    session: AsyncSession, limit: int = 20
) -> List[TestimonialRead]:
    result = await session.execute(
        select(Testimonial, Profile.full_name, Course.full_name)
        .outerjoin(Profile, Profile.user_id == Testimonial.user_id)
        .outerjoin(Course, Course.id == Testimonial.course_id)
        .where(Testimonial.is_published.is_(True))
        .order_by(Testimonial.created_at.desc(), Testimonial.id.desc())
        .limit(limit)
    )
    return [
        TestimonialRead(
            id=testimonial.id,
            content=testimonial.content,
            rating=testimonial.rating,
            student_name=student_name,
            course_name=course_name,
        )
        for testimonial, student_name, course_name in result.all()
    ]
