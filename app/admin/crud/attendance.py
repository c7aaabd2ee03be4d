"""Attendance CRUD"""
from datetime import date
from typing import List

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import db_operation, db_retry
from app.core.logging_utils import log_business_event
from app.admin.models.attendance import Attendance
from app.admin.models.enrollments import Enrollment
from app.admin.schemas.attendance import AttendanceMark


async def _find_attendance(session: AsyncSession, enrollment_id: int, session_date: date):
    result = await session.execute(
        select(Attendance).where(
            and_(
                Attendance.enrollment_id == enrollment_id,
                Attendance.session_date == session_date,
            )
        )
    )
    return result.scalar_one_or_none()


@db_operation
async def mark_attendance(
    session: AsyncSession, enrollment: Enrollment, data: AttendanceMark, marked_by: str
) -> Attendance:
    """Insert or update the single row for (enrollment, session date)"""
    session_date = data.session_date or date.today()
    # Plain id: a rollback below expires the ORM instance
    enrollment_id = enrollment.id

    record = await _find_attendance(session, enrollment_id, session_date)
    if record is None:
        record = Attendance(
            enrollment_id=enrollment_id,
            session_date=session_date,
            present=data.present,
            notes=data.notes,
        )
        session.add(record)
        try:
            await session.commit()
        except IntegrityError:
            # Another request inserted the same day first; update that row
            await session.rollback()
            record = await _find_attendance(session, enrollment_id, session_date)
            record.present = data.present
            record.notes = data.notes
            await session.commit()
    else:
        record.present = data.present
        record.notes = data.notes
        await session.commit()

    log_business_event(
        "attendance_marked",
        "enrollment",
        enrollment_id,
        {"session_date": session_date.isoformat(), "present": data.present, "marked_by": marked_by},
    )
    return record


@db_retry()
@db_operation
async def list_attendance(session: AsyncSession, enrollment_id: int) -> List[Attendance]:
    result = await session.execute(
        select(Attendance)
        .where(Attendance.enrollment_id == enrollment_id)
        .order_by(Attendance.session_date.desc())
    )
    return list(result.scalars().all())
