"""Enrollment form submission, kept until staff turn it into an enrollment"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.sql import func
from enum import Enum
from app.core.database import Base


class PaymentMethod(str, Enum):
    online = "online"      # Hosted checkout
    offline = "offline"    # Pay at the center


class RequestStatus(str, Enum):
    pending_payment = "pending_payment"
    payment_not_initiated = "payment_not_initiated"   # Checkout session could not be created
    awaiting_offline_payment = "awaiting_offline_payment"
    paid = "paid"


class EnrollmentRequest(Base):
    __tablename__ = "enrollment_requests"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    email = Column(String(255), nullable=True)

    course_id = Column(Integer, ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False)
    center_id = Column(Integer, ForeignKey("centers.id", ondelete="RESTRICT"), nullable=False)
    preferred_time = Column(String(100), nullable=True)

    payment_method = Column(SQLEnum(PaymentMethod), nullable=False)
    status = Column(SQLEnum(RequestStatus), nullable=False)
    amount = Column(Integer, nullable=False, default=0)

    checkout_session_id = Column(String(255), nullable=True, unique=True)
    payment_intent = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<EnrollmentRequest(id={self.id}, phone={self.phone}, status={self.status})>"
