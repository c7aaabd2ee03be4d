"""
Application exceptions, mapped to HTTP responses in error_handlers
"""

from typing import Optional, Dict, Any


class BaseAppException(Exception):
    """Base application exception"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


# === Authentication / authorization ===
class AuthenticationError(BaseAppException):
    """Missing, expired or malformed credentials"""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, 401, "AUTHENTICATION_ERROR", details)


class AuthorizationError(BaseAppException):
    """
    Viewer may not see or touch the record.

    The message is fixed so that "outside your scope" and "does not exist"
    are indistinguishable to scoped viewers.
    """

    def __init__(
        self, message: str = "Not permitted", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, 403, "AUTHORIZATION_ERROR", details)


# === Validation ===
class ValidationError(BaseAppException):
    """Domain validation failure"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 400, "VALIDATION_ERROR", details)


class DuplicateError(BaseAppException):
    """Record already exists"""

    def __init__(self, resource: str, field: str, value: str):
        message = f"{resource} with {field} '{value}' already exists"
        details = {"resource": resource, "field": field, "value": value}
        super().__init__(message, 409, "DUPLICATE_ERROR", details)


# === Resources ===
class NotFoundError(BaseAppException):
    """Resource not found"""

    def __init__(self, resource: str, identifier: str = None):
        if identifier:
            message = f"{resource} with identifier '{identifier}' not found"
            details = {"resource": resource, "identifier": identifier}
        else:
            message = f"{resource} not found"
            details = {"resource": resource}
        super().__init__(message, 404, "NOT_FOUND", details)


# === Business rules ===
class BusinessLogicError(BaseAppException):
    """Business rule violation"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 400, "BUSINESS_LOGIC_ERROR", details)


class InvalidStatusTransitionError(BusinessLogicError):
    """Enrollment status change not allowed by the lifecycle"""

    def __init__(self, current: str, requested: str):
        message = f"Cannot move enrollment from '{current}' to '{requested}'"
        super().__init__(message, {"current": current, "requested": requested})
        self.status_code = 409
        self.error_code = "INVALID_STATUS_TRANSITION"


# === Database ===
class DatabaseError(BaseAppException):
    """Database failure"""

    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, 500, "DATABASE_ERROR", details)


class DatabaseConnectionError(BaseAppException):
    """Database unreachable"""

    def __init__(self, message: str = "Database connection failed"):
        super().__init__(message, 503, "DATABASE_CONNECTION_ERROR")


class DatabaseTimeoutError(BaseAppException):
    """Database operation timed out"""

    def __init__(self, operation: str, timeout: int):
        message = f"Database operation '{operation}' timed out after {timeout}s"
        details = {"operation": operation, "timeout": timeout}
        super().__init__(message, 504, "DATABASE_TIMEOUT", details)


class DatabaseIntegrityError(BaseAppException):
    """Integrity constraint violated"""

    def __init__(self, constraint: str, details: Optional[Dict[str, Any]] = None):
        message = f"Database integrity constraint violated: {constraint}"
        error_details = {"constraint": constraint}
        if details:
            error_details.update(details)
        super().__init__(message, 409, "DATABASE_INTEGRITY_ERROR", error_details)


# === External services ===
class ExternalServiceError(BaseAppException):
    """External service failed"""

    def __init__(self, service: str, message: str = None):
        message = message or f"External service '{service}' error"
        details = {"service": service}
        super().__init__(message, 502, "EXTERNAL_SERVICE_ERROR", details)


class PaymentGatewayError(ExternalServiceError):
    """Checkout session could not be created"""

    def __init__(self, message: str = "Payment gateway rejected the request"):
        super().__init__("stripe", message)


class NotificationDeliveryError(ExternalServiceError):
    """Email could not be delivered"""

    def __init__(self, message: str = "Notification could not be delivered"):
        super().__init__("email", message)


class ExternalTimeoutError(ExternalServiceError):
    """External call exceeded its deadline"""

    def __init__(self, service: str, timeout: float):
        super().__init__(service, f"External service '{service}' timed out after {timeout}s")
        self.status_code = 504
        self.error_code = "EXTERNAL_TIMEOUT"
        self.details["timeout"] = timeout


class WebhookSignatureError(BaseAppException):
    """Webhook payload failed signature verification"""

    def __init__(self, message: str = "Invalid webhook signature"):
        super().__init__(message, 400, "WEBHOOK_SIGNATURE_ERROR")


# === Configuration ===
class ConfigurationError(BaseAppException):
    """Configuration error"""

    def __init__(self, parameter: str, message: str = None):
        message = (
            message or f"Configuration parameter '{parameter}' is invalid or missing"
        )
        details = {"parameter": parameter}
        super().__init__(message, 500, "CONFIGURATION_ERROR", details)
