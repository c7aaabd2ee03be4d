from pydantic import BaseModel
from datetime import date
from typing import List, Optional

from app.admin.models.enrollments import EnrollmentStatus, PaymentStatus


class StudentEnrollmentSummary(BaseModel):
    enrollment_id: int
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
    total_lessons: int
    completed_lessons: int
    completion_percentage: int
    total_sessions: int
    days_attended: int
    attendance_percentage: int
    certificate_number: Optional[str] = None


class StudentDashboard(BaseModel):
    user_id: str
    full_name: Optional[str] = None
    total_enrollments: int
    active_enrollments: int
    completed_enrollments: int
    certificates: int
    average_progress: float
    total_paid: int
    total_due: int
    enrollments: List[StudentEnrollmentSummary]


class StudentCertificate(BaseModel):
    enrollment_id: int
    certificate_number: str
    issue_date: date
    course_name: str
    course_full_name: str
    file_url: Optional[str] = None
