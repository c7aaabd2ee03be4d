from sqlalchemy import Column, Integer, String, Date, ForeignKey
from sqlalchemy.orm import relationship
from datetime import date
from app.core.database import Base


class Certificate(Base):
    """At most one certificate per enrollment (unique enrollment_id)"""
    __tablename__ = "certificates"

    id = Column(Integer, primary_key=True, index=True)
    enrollment_id = Column(
        Integer, ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    certificate_number = Column(String(50), nullable=False, unique=True)  # PREFIX-YEAR-XXXXXX
    issue_date = Column(Date, nullable=False, default=date.today)
    file_url = Column(String(512), nullable=True)

    enrollment = relationship("Enrollment", back_populates="certificate")
