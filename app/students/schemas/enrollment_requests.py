from pydantic import BaseModel, Field
from typing import Optional

from app.students.models.enrollment_requests import PaymentMethod, RequestStatus


class EnrollmentRequestCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=20)
    email: Optional[str] = Field(None, max_length=255)
    course_id: int
    center_id: int
    preferred_time: Optional[str] = Field(None, max_length=100)
    payment_method: PaymentMethod = PaymentMethod.offline


class EnrollmentRequestResponse(BaseModel):
    request_id: int
    status: RequestStatus
    payment_method: PaymentMethod
    amount: int
    checkout_url: Optional[str] = None
    session_id: Optional[str] = None
    whatsapp_url: Optional[str] = None


class WebhookAck(BaseModel):
    received: bool = True
    duplicate: bool = False
    event_type: Optional[str] = None
