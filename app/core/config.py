import os


class ConfigurationError(RuntimeError):
    """Raised when an operation needs a setting that is not configured."""


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# ✅ Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./recruiting.db")
RUN_MIGRATIONS = _get_bool("RUN_MIGRATIONS", False)
DB_POOL_SIZE = _get_int("DB_POOL_SIZE", 5)
DB_MAX_OVERFLOW = _get_int("DB_MAX_OVERFLOW", 10)

# ✅ Security
SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = _get_int("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24)
MAGIC_LINK_EXPIRE_MINUTES = _get_int("MAGIC_LINK_EXPIRE_MINUTES", 60)

# ✅ Application
APP_URL = os.getenv("APP_URL", "http://localhost:3000").rstrip("/")
API_URL = os.getenv("API_URL", "http://localhost:8000").rstrip("/")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")

# ✅ Object storage
STORAGE_DIR = os.getenv("STORAGE_DIR", "storage")
RESUME_BUCKET = os.getenv("RESUME_BUCKET", "resumes")
UPLOAD_URL_EXPIRE_SECONDS = _get_int("UPLOAD_URL_EXPIRE_SECONDS", 2 * 60 * 60)
SIGNED_URL_EXPIRE_SECONDS = _get_int("SIGNED_URL_EXPIRE_SECONDS", 300)
MAX_UPLOAD_BYTES = _get_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024)

# ✅ Email (SMTP)
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = _get_int("SMTP_PORT", 587)
SMTP_USERNAME = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
SMTP_USE_TLS = _get_bool("SMTP_USE_TLS", True)
SMTP_TIMEOUT = _get_int("SMTP_TIMEOUT", 30)
EMAIL_FROM = os.getenv("EMAIL_FROM", "careers@company.com")
REPORT_RECEIVER_EMAIL = os.getenv("REPORT_RECEIVER_EMAIL")


def require_setting(name: str) -> str:
    """
    Return a configured setting or fail with a descriptive error.

    Settings are looked up on this module so values patched at runtime
    (tests, scripts) are honoured.
    """
    value = globals().get(name)
    if value is None or value == "":
        raise ConfigurationError(f"{name} is not set - configure it in the environment")
    return value
