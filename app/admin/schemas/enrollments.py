from pydantic import BaseModel, Field
from datetime import date
from typing import List, Optional

from app.admin.models.enrollments import EnrollmentStatus, PaymentStatus


class EnrollmentCreate(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    course_id: int
    center_id: Optional[int] = None
    batch_timing: Optional[str] = Field(None, max_length=100)
    enrollment_date: Optional[date] = None
    send_admission_email: bool = True


class EnrollmentStatusUpdate(BaseModel):
    status: EnrollmentStatus


class EnrollmentRead(BaseModel):
    id: int
    user_id: str
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    student_phone: Optional[str] = None
    course_id: int
    course_name: str
    course_full_name: str
    center_id: Optional[int] = None
    center_name: Optional[str] = None
    enrollment_date: date
    batch_timing: Optional[str] = None
    status: EnrollmentStatus
    payment_status: PaymentStatus
    fee: int
    amount_paid: int
    amount_due: int


class EnrollmentListResponse(BaseModel):
    enrollments: List[EnrollmentRead]
    total: int
    page: int
    size: int
    pages: int


class StatusChangeResponse(BaseModel):
    enrollment: EnrollmentRead
    changed: bool
