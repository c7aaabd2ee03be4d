import os

# PostgreSQL settings
POSTGRES_USER = os.getenv("POSTGRES_USER", "postgres")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
POSTGRES_DB = os.getenv("POSTGRES_DB", "institute")
POSTGRES_HOST = os.getenv("POSTGRES_HOST", "db")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+asyncpg://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}",
)

# Identity provider (tokens are issued elsewhere, we only verify them)
AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET")
AUTH_JWT_ALGORITHM = os.getenv("AUTH_JWT_ALGORITHM", "HS256")
AUTH_JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE", "")

# Stripe checkout
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")
PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "inr")
PUBLIC_SITE_URL = os.getenv("PUBLIC_SITE_URL", "http://localhost:8080").rstrip("/")

# Email (Resend HTTP API)
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
RESEND_API_URL = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
EMAIL_FROM = os.getenv("EMAIL_FROM", "Modern Computer Centre <onboarding@resend.dev>")

# Institute
INSTITUTE_NAME = os.getenv("INSTITUTE_NAME", "Modern Computer Centre")
CERTIFICATE_PREFIX = os.getenv("CERTIFICATE_PREFIX", "AMC")
WHATSAPP_NUMBER = os.getenv("WHATSAPP_NUMBER", "919733089257")
DEFAULT_CENTERS = [
    name.strip()
    for name in os.getenv("DEFAULT_CENTERS", "Hatisala,Satulia").split(",")
    if name.strip()
]

# Timeouts for outbound calls (seconds)
EXTERNAL_CALL_TIMEOUT = float(os.getenv("EXTERNAL_CALL_TIMEOUT", "10.0"))

# Environment
ENVIRONMENT = os.getenv("ENVIRONMENT", "production").lower()
DEBUG = ENVIRONMENT in ["development", "dev"]

# Database retry settings
DB_RETRY_ATTEMPTS = int(os.getenv("DB_RETRY_ATTEMPTS", "3"))
DB_RETRY_DELAY = float(os.getenv("DB_RETRY_DELAY", "1.0"))
DB_RETRY_BACKOFF_FACTOR = float(os.getenv("DB_RETRY_BACKOFF_FACTOR", "2.0"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json" if not DEBUG else "text")

# Rate limiting
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

# Application
APP_NAME = os.getenv("APP_NAME", "Institute Portal API")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
API_PREFIX = "/api/v1"
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS", "http://localhost:3000,http://localhost:8080"
    ).split(",")
    if origin.strip()
]


def validate_config():
    """Validate critical settings at startup"""
    errors = []

    if not AUTH_JWT_SECRET:
        errors.append("AUTH_JWT_SECRET is required")

    if not DATABASE_URL:
        errors.append("DATABASE_URL or POSTGRES_* settings are required")

    if DB_RETRY_ATTEMPTS < 1:
        errors.append("DB_RETRY_ATTEMPTS must be >= 1")

    if DB_RETRY_DELAY < 0:
        errors.append("DB_RETRY_DELAY must be >= 0")

    if EXTERNAL_CALL_TIMEOUT <= 0:
        errors.append("EXTERNAL_CALL_TIMEOUT must be > 0")

    if not DEFAULT_CENTERS:
        errors.append("DEFAULT_CENTERS must name at least one center")

    if errors:
        raise ValueError(f"Configuration errors: {'; '.join(errors)}")


# Optional validation at import time
if os.getenv("VALIDATE_CONFIG_ON_IMPORT", "true").lower() == "true":
    try:
        validate_config()
    except ValueError as e:
        print(f"⚠️  Configuration warning: {e}")
