from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from enum import Enum
from typing import Optional


class NotificationType(str, Enum):
    admission = "admission"
    course_completion = "course_completion"
    payment_reminder = "payment_reminder"


class TemplateData(BaseModel):
    course_name: Optional[str] = None
    student_name: Optional[str] = None
    amount_due: Optional[int] = None
    due_date: Optional[str] = None
    certificate_number: Optional[str] = None


class NotificationDispatch(BaseModel):
    type: NotificationType
    user_id: str
    data: TemplateData = Field(default_factory=TemplateData)


class PaymentReminderRequest(BaseModel):
    due_date: Optional[str] = None


class NotificationRead(BaseModel):
    id: int
    user_id: Optional[str] = None
    type: str
    title: str
    message: str
    is_read: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DispatchResponse(BaseModel):
    notification: NotificationRead
    email_sent: bool
