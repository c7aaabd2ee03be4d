from pydantic import BaseModel
from typing import List, Optional

from app.admin.models.user_roles import AppRole


class ProfileRead(BaseModel):
    id: int
    user_id: str
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    center_id: Optional[int] = None
    center_name: Optional[str] = None
    role: AppRole = AppRole.student


class ProfileListResponse(BaseModel):
    profiles: List[ProfileRead]
    total: int


class ProfileCenterUpdate(BaseModel):
    center_id: Optional[int] = None
