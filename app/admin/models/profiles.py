"""User profile; center_id binds an admin (or files a student) under one center"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)

    # Identity-provider subject (UUID string)
    user_id = Column(String(64), nullable=False, unique=True, index=True)

    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)

    # NULL means not attached to any center
    center_id = Column(Integer, ForeignKey("centers.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    center = relationship("Center")

    def __repr__(self):
        return f"<Profile(id={self.id}, user_id={self.user_id}, center_id={self.center_id})>"
