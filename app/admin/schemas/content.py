from pydantic import BaseModel, ConfigDict, Field
from datetime import date
from typing import Optional


class VideoCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    video_url: str = Field(..., min_length=1, max_length=512)
    thumbnail_url: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, ge=0)
    order_index: int = 0
    is_public: bool = True
    course_id: Optional[int] = None
    center_id: Optional[int] = None


class VideoRead(VideoCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)


class AchievementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    student_name: Optional[str] = None
    course_name: Optional[str] = None
    achievement_date: Optional[date] = None
    image_url: Optional[str] = None
    is_featured: bool = False
    center_id: Optional[int] = None


class AchievementRead(AchievementCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)
