from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional

from app.admin.schemas.enrollments import EnrollmentRead


class PaymentCreate(BaseModel):
    amount: int = Field(..., gt=0, description="Whole rupees")
    payment_method: str = Field("cash", min_length=1, max_length=50)
    receipt_number: Optional[str] = Field(None, max_length=50)
    payment_date: Optional[datetime] = None
    notes: Optional[str] = None


class PaymentRead(BaseModel):
    id: int
    enrollment_id: int
    amount: int
    payment_date: datetime
    payment_method: str
    receipt_number: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PaymentRecordedResponse(BaseModel):
    payment: PaymentRead
    enrollment: EnrollmentRead


class PaymentLedgerRow(PaymentRead):
    student_name: Optional[str] = None
    course_name: str
    center_id: Optional[int] = None
    center_name: Optional[str] = None


class PaymentLedgerResponse(BaseModel):
    payments: List[PaymentLedgerRow]
    total: int
    total_amount: int
