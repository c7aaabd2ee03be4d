from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional


class LessonProgressRead(BaseModel):
    lesson_id: int
    title: str
    order_index: int
    duration_minutes: Optional[int] = None
    completed: bool
    completed_at: Optional[datetime] = None


class CourseProgress(BaseModel):
    enrollment_id: int
    total_lessons: int
    completed_lessons: int
    completion_percentage: int
    lessons: List[LessonProgressRead]
