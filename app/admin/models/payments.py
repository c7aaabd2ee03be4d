"""Append-only payment ledger"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class PaymentHistory(Base):
    __tablename__ = "payment_history"

    id = Column(Integer, primary_key=True, index=True)
    enrollment_id = Column(Integer, ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False, index=True)

    amount = Column(Integer, nullable=False)
    payment_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    payment_method = Column(String(50), nullable=False, default="cash")
    receipt_number = Column(String(50), nullable=True, unique=True)
    notes = Column(Text, nullable=True)

    enrollment = relationship("Enrollment", back_populates="payments")

    def __repr__(self):
        return f"<PaymentHistory(id={self.id}, enrollment_id={self.enrollment_id}, amount={self.amount})>"
