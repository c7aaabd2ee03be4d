from sqlalchemy import Column, Integer, Boolean, Date, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base


class Attendance(Base):
    """One row per enrollment per session date"""
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("enrollment_id", "session_date", name="uq_attendance_enrollment_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    enrollment_id = Column(Integer, ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False, index=True)
    session_date = Column(Date, nullable=False)
    present = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)

    enrollment = relationship("Enrollment", back_populates="attendance")
