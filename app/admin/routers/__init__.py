"""Admin Routers Package"""
from .dashboard import router as dashboard_router
from .enrollments import router as enrollments_router
from .payments import router as payments_router
from .profiles import router as profiles_router
from .content import router as content_router
from .notifications import router as notifications_router

__all__ = [
    "dashboard_router",
    "enrollments_router",
    "payments_router",
    "profiles_router",
    "content_router",
    "notifications_router",
]
