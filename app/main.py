from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from slowapi.errors import RateLimitExceeded

from app.core.limits import limiter, rate_limit_handler
from app.core.init_db import init_database
from app.core.error_handlers import setup_exception_handlers
from app.core.database import db_manager
from app.core.middleware import setup_middleware
from app.core.logging_utils import (
    setup_logging,
    get_logger,
    log_business_event,
    error_tracker,
)
from app.core.config import (
    validate_config,
    APP_NAME,
    APP_VERSION,
    API_PREFIX,
    CORS_ORIGINS,
    DEBUG,
    ENVIRONMENT,
    LOG_LEVEL,
    LOG_FORMAT,
)

from app.admin.routers import (
    dashboard_router as admin_dashboard,
    enrollments_router as admin_enrollments,
    payments_router as admin_payments,
    profiles_router as admin_profiles,
    content_router as admin_content,
    notifications_router as admin_notifications,
)
from app.students.routers import (
    dashboard_router as student_dashboard,
    catalog_router,
    enrollment_requests_router,
    payments_router,
)

setup_logging(LOG_LEVEL, LOG_FORMAT)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown"""

    # Startup
    logger.info(f"Starting {APP_NAME} v{APP_VERSION}")

    try:
        validate_config()
        logger.info("✅ Configuration validated")

        await init_database()
        logger.info("✅ Database initialized")

        log_business_event(
            "application_started",
            "system",
            0,
            {"version": APP_VERSION, "environment": ENVIRONMENT},
        )

        logger.info("🚀 Application startup completed")

    except Exception as e:
        logger.error(f"❌ Application startup failed: {str(e)}")
        error_tracker.track_error(
            "STARTUP_ERROR",
            str(e),
            {"component": "application_startup", "version": APP_VERSION},
        )
        raise

    yield

    # Shutdown
    logger.info("🛑 Shutting down application...")

    try:
        await db_manager.close_connections()
        logger.info("✅ Database connections closed")

    except Exception as e:
        logger.error(f"❌ Error during shutdown: {str(e)}")

    logger.info("👋 Application shutdown completed")


app = FastAPI(
    title=APP_NAME,
    description="Computer training institute portal",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=DEBUG,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

setup_middleware(
    app,
    {
        "slow_request_threshold": 5.0,
        "exclude_paths": [
            "/health",
            f"{API_PREFIX}/health",
            "/docs",
            "/openapi.json",
            "/redoc",
            "/favicon.ico",
        ],
    },
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

for router in (
    catalog_router,
    enrollment_requests_router,
    payments_router,
    student_dashboard,
    admin_dashboard,
    admin_enrollments,
    admin_payments,
    admin_profiles,
    admin_content,
    admin_notifications,
):
    app.include_router(router, prefix=API_PREFIX)


@app.get("/health")
@app.get(f"{API_PREFIX}/health")
async def health_check():
    """Liveness plus a database round trip"""
    try:
        await db_manager.check_connection()
        database = "ok"
    except Exception as e:
        logger.warning(f"Health check database failure: {e}")
        database = "unavailable"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "version": APP_VERSION,
        "database": database,
    }
