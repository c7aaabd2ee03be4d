from pydantic import BaseModel, ConfigDict, Field
from datetime import date
from typing import List, Optional


class AttendanceMark(BaseModel):
    session_date: Optional[date] = Field(None, description="Defaults to today")
    present: bool = True
    notes: Optional[str] = None


class AttendanceRead(BaseModel):
    id: int
    enrollment_id: int
    session_date: date
    present: bool
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AttendanceSummary(BaseModel):
    enrollment_id: int
    total_sessions: int
    days_present: int
    attendance_percentage: int
    records: List[AttendanceRead]
