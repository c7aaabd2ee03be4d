from pydantic import BaseModel, ConfigDict
from typing import Optional


class CenterRead(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CourseRead(BaseModel):
    id: int
    name: str
    full_name: str
    description: Optional[str] = None
    duration: Optional[str] = None
    category: Optional[str] = None
    fee: int
    discount_percent: int = 0
    is_popular: bool = False

    model_config = ConfigDict(from_attributes=True)
