"""Marketing content shown on the public site, optionally per center"""
from sqlalchemy import Column, Integer, String, Text, Boolean, Date, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.core.database import Base


class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    student_name = Column(String(255), nullable=True)
    course_name = Column(String(255), nullable=True)
    achievement_date = Column(Date, nullable=True)
    image_url = Column(String(512), nullable=True)
    is_featured = Column(Boolean, default=False, nullable=False)
    center_id = Column(Integer, ForeignKey("centers.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Video(Base):
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    video_url = Column(String(512), nullable=False)
    thumbnail_url = Column(String(512), nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    is_public = Column(Boolean, default=True, nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True)
    center_id = Column(Integer, ForeignKey("centers.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
