from pydantic import BaseModel
from typing import Any, Dict, List, Optional


class AdminDashboard(BaseModel):
    center_id: Optional[int] = None
    total_students: int
    total_enrollments: int
    active_enrollments: int
    completed_enrollments: int
    cancelled_enrollments: int
    total_revenue: int
    outstanding_dues: int
    average_progress: float
    payment_status_counts: Dict[str, int]


class TrackedError(BaseModel):
    timestamp: float
    type: str
    message: str
    context: Dict[str, Any] = {}


class ErrorStats(BaseModel):
    error_counts: Dict[str, int]
    total_errors: int
    unique_error_types: int
    last_errors: List[TrackedError]
