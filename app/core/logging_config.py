"""
Logging configuration for the recruiting portal API.

Console output plus a rotating file under ``LOG_DIR``. Log records never
carry secrets or full applicant email addresses; pass structured values
through sanitize_log_data first.
"""
import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any

LOG_FILE_NAME = "recruiting.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

REDACTED = "***REDACTED***"

SENSITIVE_KEYS = (
    "password", "token", "secret", "key", "code",
    "signed_url", "signedurl", "database_url",
)

# Chatty libraries that only log useful things at WARNING and above
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "alembic", "multipart")


def _formatter(detailed: bool) -> logging.Formatter:
    location = " - %(funcName)s:%(lineno)d" if detailed else ""
    return logging.Formatter(
        f"%(asctime)s - %(name)s - %(levelname)s{location} - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def setup_logging(log_level: str = "INFO", log_dir: str = "logs"):
    """
    Configure the root logger. Safe to call more than once; handlers are replaced.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL; unknown values fall back to INFO
        log_dir: Directory for the rotating log file, created if missing
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    handlers = [
        (logging.StreamHandler(sys.stdout), False),
        (RotatingFileHandler(log_path / LOG_FILE_NAME, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS), True),
    ]

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    for handler, detailed in handlers:
        handler.setLevel(level)
        handler.setFormatter(_formatter(detailed))
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def mask_email(value: str) -> str:
    """jane.doe@university.edu -> j***@university.edu"""
    local, sep, domain = value.partition("@")
    if not sep:
        return REDACTED
    return f"{local[:1]}***@{domain}"


def _sanitize_value(key: str, value: Any) -> Any:
    lowered = key.lower()
    if isinstance(value, dict):
        return sanitize_log_data(value)
    if any(sensitive in lowered for sensitive in SENSITIVE_KEYS):
        return REDACTED
    if "email" in lowered and isinstance(value, str):
        return mask_email(value)
    return value


def sanitize_log_data(data: dict) -> dict:
    """
    Copy of ``data`` that is safe to log.

    Secret-looking keys are redacted, email addresses are masked, and nested
    dicts are sanitized the same way.
    """
    return {key: _sanitize_value(str(key), value) for key, value in data.items()}
