"""Lesson progress of an enrollment"""
from datetime import datetime, timezone

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import db_operation, db_retry
from app.core.exceptions import NotFoundError
from app.core.logging_utils import log_business_event
from app.admin.models.enrollments import Enrollment
from app.admin.models.lessons import Lesson
from app.admin.services.metrics import completion_percentage
from app.admin.services.transitions import check_progress_allowed
from app.students.models.lesson_progress import LessonProgress
from app.students.schemas.progress import CourseProgress, LessonProgressRead


@db_retry()
@db_operation
async def get_course_progress(session: AsyncSession, enrollment: Enrollment) -> CourseProgress:
    lessons_result = await session.execute(
        select(Lesson)
        .where(Lesson.course_id == enrollment.course_id)
        .order_by(Lesson.order_index, Lesson.id)
    )
    lessons = list(lessons_result.scalars().all())

    progress_result = await session.execute(
        select(LessonProgress).where(LessonProgress.enrollment_id == enrollment.id)
    )
    progress_rows = list(progress_result.scalars().all())
    by_lesson = {row.lesson_id: row for row in progress_rows}

    lesson_ids = {lesson.id for lesson in lessons}
    # Marks for lessons since removed from the course do not count
    relevant = [row for row in progress_rows if row.lesson_id in lesson_ids]

    items = []
    for lesson in lessons:
        row = by_lesson.get(lesson.id)
        items.append(
            LessonProgressRead(
                lesson_id=lesson.id,
                title=lesson.title,
                order_index=lesson.order_index,
                duration_minutes=lesson.duration_minutes,
                completed=bool(row and row.completed),
                completed_at=row.completed_at if row else None,
            )
        )

    return CourseProgress(
        enrollment_id=enrollment.id,
        total_lessons=len(lessons),
        completed_lessons=len({row.lesson_id for row in relevant if row.completed}),
        completion_percentage=completion_percentage(relevant, len(lessons)),
        lessons=items,
    )


async def _find_progress(session: AsyncSession, enrollment_id: int, lesson_id: int):
    result = await session.execute(
        select(LessonProgress).where(
            and_(
                LessonProgress.enrollment_id == enrollment_id,
                LessonProgress.lesson_id == lesson_id,
            )
        )
    )
    return result.scalar_one_or_none()


@db_operation
async def complete_lesson(
    session: AsyncSession, enrollment: Enrollment, lesson_id: int
) -> LessonProgress:
    """
    Mark a lesson completed. Idempotent: the first completion time is kept.
    Cancelled enrollments accept no progress.
    """
    enrollment_id = enrollment.id
    check_progress_allowed(enrollment.status)

    lesson = await session.get(Lesson, lesson_id)
    if lesson is None or lesson.course_id != enrollment.course_id:
        raise NotFoundError("Lesson", str(lesson_id))

    row = await _find_progress(session, enrollment_id, lesson_id)
    if row is not None and row.completed:
        return row

    now = datetime.now(timezone.utc)
    if row is None:
        row = LessonProgress(
            enrollment_id=enrollment_id, lesson_id=lesson_id, completed=True, completed_at=now
        )
        session.add(row)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            row = await _find_progress(session, enrollment_id, lesson_id)
            if not row.completed:
                row.completed = True
                row.completed_at = now
                await session.commit()
            return row
    else:
        row.completed = True
        row.completed_at = now
        await session.commit()

    log_business_event(
        "lesson_completed", "enrollment", enrollment_id, {"lesson_id": lesson_id}
    )
    return row
