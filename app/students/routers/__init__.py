"""Student and public Routers Package"""
from .dashboard import router as dashboard_router
from .catalog import router as catalog_router
from .enrollment_requests import router as enrollment_requests_router
from .payments import router as payments_router

__all__ = [
    "dashboard_router",
    "catalog_router",
    "enrollment_requests_router",
    "payments_router",
]
