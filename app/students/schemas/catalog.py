from pydantic import BaseModel
from typing import Optional


class TestimonialRead(BaseModel):
    id: int
    content: str
    rating: int
    student_name: Optional[str] = None
    course_name: Optional[str] = None
