"""Enrollment: a student's registration in a course at a center"""
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    ForeignKey,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from enum import Enum
from datetime import date
from app.core.database import Base


class EnrollmentStatus(str, Enum):
    active = "active"
    completed = "completed"      # Terminal
    cancelled = "cancelled"      # May be reactivated


class PaymentStatus(str, Enum):
    pending = "pending"          # Nothing paid
    partial = "partial"          # 0 < paid < fee
    paid = "paid"                # paid >= fee


class Enrollment(Base):
    __tablename__ = "enrollments"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(String(64), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False, index=True)

    # NULL is "unassigned" and is only visible under the all-centers view
    center_id = Column(Integer, ForeignKey("centers.id", ondelete="SET NULL"), nullable=True, index=True)

    enrollment_date = Column(Date, nullable=False, default=date.today)
    status = Column(SQLEnum(EnrollmentStatus), nullable=False, default=EnrollmentStatus.active)
    batch_timing = Column(String(100), nullable=True)

    # Derived from payment_history, never written directly by clients
    payment_status = Column(SQLEnum(PaymentStatus), nullable=False, default=PaymentStatus.pending)
    amount_paid = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    course = relationship("Course", back_populates="enrollments")
    center = relationship("Center", back_populates="enrollments")
    payments = relationship("PaymentHistory", back_populates="enrollment", order_by="PaymentHistory.payment_date")
    attendance = relationship("Attendance", back_populates="enrollment")
    certificate = relationship("Certificate", back_populates="enrollment", uselist=False)

    def __repr__(self):
        return f"<Enrollment(id={self.id}, user_id={self.user_id}, course_id={self.course_id}, status={self.status})>"
