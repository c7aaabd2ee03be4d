import time
import logging
import uuid
from typing import Callable, Optional
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.logging_utils import error_tracker

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_PATHS = ["/health", "/docs", "/openapi.json", "/redoc"]


def client_ip(request: Request) -> str:
    """Client address, honouring reverse-proxy headers"""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"


def _elapsed_ms(start_time: float) -> float:
    return round((time.time() - start_time) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request with a short request id, echoed back as X-Request-ID
    """

    def __init__(self, app: ASGIApp, exclude_paths: Optional[list] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or DEFAULT_EXCLUDED_PATHS

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start_time = time.time()

        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "query_params": (
                    str(request.query_params) if request.query_params else None
                ),
                "client_ip": client_ip(request),
                "user_agent": request.headers.get("user-agent"),
            },
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": _elapsed_ms(start_time),
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            raise

        logger.info(
            f"Request completed: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": _elapsed_ms(start_time),
                "response_size": response.headers.get("content-length"),
            },
        )

        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds the usual hardening headers to every response"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; img-src 'self' data: https:; frame-ancestors 'none'"
        )

        return response


class PerformanceMonitoringMiddleware(BaseHTTPMiddleware):
    """Warns about requests slower than the threshold (seconds)"""

    def __init__(self, app: ASGIApp, slow_request_threshold: float = 1.0):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        if duration > self.slow_request_threshold:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": round(duration * 1000, 2),
                    "threshold_ms": self.slow_request_threshold * 1000,
                    "status_code": response.status_code,
                    "category": "performance",
                },
            )

        return response


class ErrorTrackingMiddleware(BaseHTTPMiddleware):
    """Feeds 5xx responses and unhandled exceptions into the error tracker"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
        except Exception as e:
            error_tracker.track_error(
                error_type=f"UNHANDLED_{type(e).__name__}",
                error_message=str(e),
                context={
                    "method": request.method,
                    "path": request.url.path,
                    "client_ip": client_ip(request),
                },
            )
            raise

        if response.status_code >= 500:
            error_tracker.track_error(
                error_type=f"HTTP_{response.status_code}",
                error_message=f"HTTP {response.status_code} response",
                context={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                },
            )

        return response


def setup_middleware(app, config: dict = None):
    """
    Register middleware. Starlette runs them in reverse order of registration,
    so request logging (added last) wraps everything else.

    Args:
        app: FastAPI application
        config: slow_request_threshold, exclude_paths
    """
    config = config or {}

    app.add_middleware(ErrorTrackingMiddleware)
    app.add_middleware(
        PerformanceMonitoringMiddleware,
        slow_request_threshold=config.get("slow_request_threshold", 1.0),
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RequestLoggingMiddleware,
        exclude_paths=config.get("exclude_paths", DEFAULT_EXCLUDED_PATHS),
    )

    logger.info("All middleware configured successfully")
