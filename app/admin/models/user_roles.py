from sqlalchemy import Column, Integer, String, Enum as SQLEnum
from enum import Enum
from app.core.database import Base


class AppRole(str, Enum):
    admin = "admin"
    student = "student"


class UserRole(Base):
    """Role grant; users without a row are students"""
    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    role = Column(SQLEnum(AppRole), nullable=False, default=AppRole.student)

    def __repr__(self):
        return f"<UserRole(user_id={self.user_id}, role={self.role})>"
