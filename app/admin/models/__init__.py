from app.core.database import Base
from .centers import Center
from .courses import Course
from .profiles import Profile
from .user_roles import UserRole, AppRole
from .enrollments import Enrollment, EnrollmentStatus, PaymentStatus
from .payments import PaymentHistory
from .attendance import Attendance
from .lessons import Lesson
from .certificates import Certificate
from .notifications import Notification
from .content import Achievement, Video

__all__ = [
    "Base",
    "Center",
    "Course",
    "Profile",
    "UserRole",
    "AppRole",
    "Enrollment",
    "EnrollmentStatus",
    "PaymentStatus",
    "PaymentHistory",
    "Attendance",
    "Lesson",
    "Certificate",
    "Notification",
    "Achievement",
    "Video",
]
