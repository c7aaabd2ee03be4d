"""Course catalog"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True)       # Short code, e.g. DCA
    full_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(String(50), nullable=True)                  # "6 Months"
    category = Column(String(50), nullable=True)

    # Fees are whole rupees
    fee = Column(Integer, nullable=False, default=0)
    discount_percent = Column(Integer, nullable=False, default=0)
    is_popular = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    enrollments = relationship("Enrollment", back_populates="course")
    lessons = relationship("Lesson", back_populates="course", order_by="Lesson.order_index")

    def __repr__(self):
        return f"<Course(id={self.id}, name={self.name}, fee={self.fee})>"
