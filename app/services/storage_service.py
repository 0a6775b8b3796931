"""
Object storage for résumé files.

Objects live under ``STORAGE_DIR/RESUME_BUCKET``. Access is granted through
signed URLs: time-limited JWTs that name one object path and one operation
(upload or download). The API routes only hand out those URLs; file bytes go
straight to the storage endpoints in ``app.api.routes.storage``.
"""
import logging
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path, PurePosixPath
from typing import Optional, Dict
from urllib.parse import urlencode

from app.core import config
from app.core.security import (
    create_signed_token,
    decode_signed_token,
    STORAGE_UPLOAD_PURPOSE,
    STORAGE_DOWNLOAD_PURPOSE,
)

logger = logging.getLogger(__name__)

RESUME_PREFIX = "resumes"
_EXTENSION_RE = re.compile(r"^[A-Za-z0-9]{1,10}$")


class InvalidSignedUrlError(ValueError):
    def __init__(self, message: str = "Invalid or expired signed URL"):
        super().__init__(message)


def get_bucket_root() -> Path:
    return Path(config.STORAGE_DIR) / config.RESUME_BUCKET


def normalize_object_path(path: str) -> str:
    """
    Validate an object path and return it in canonical form.

    Raises:
        ValueError: Empty, absolute, or escaping the bucket
    """
    if not path or not path.strip():
        raise ValueError("Path is required")

    candidate = PurePosixPath(path.strip().replace("\\", "/"))
    if candidate.is_absolute() or any(part in ("..", "") for part in candidate.parts):
        raise ValueError("Invalid storage path")
    return str(candidate)


def build_resume_path(principal_id: str, filename: str, now: Optional[datetime] = None) -> str:
    """
    Storage path for a new résumé upload: ``resumes/{principalId}-{timestampMillis}.{ext}``.

    The extension comes from the client's file name; the rest is generated so
    uploads never collide with or overwrite another user's object.
    """
    if not filename or "." not in filename:
        raise ValueError("File name must include an extension")

    extension = filename.rsplit(".", 1)[-1].lower()
    if not _EXTENSION_RE.match(extension):
        raise ValueError("Unsupported file extension")

    now = now or datetime.now(timezone.utc)
    timestamp_ms = int(now.timestamp() * 1000)
    return f"{RESUME_PREFIX}/{principal_id}-{timestamp_ms}.{extension}"


def is_owned_resume_path(principal_id: str, path: str) -> bool:
    """True if ``path`` was generated for ``principal_id`` by build_resume_path."""
    return normalize_object_path(path).startswith(f"{RESUME_PREFIX}/{principal_id}-")


def _signed_storage_url(endpoint: str, token: str) -> str:
    return f"{config.API_URL}/storage/{endpoint}?{urlencode({'token': token})}"


def create_signed_upload_url(path: str) -> Dict[str, str]:
    """Upload credential for one object path."""
    path = normalize_object_path(path)
    token = create_signed_token(
        {"path": path},
        STORAGE_UPLOAD_PURPOSE,
        timedelta(seconds=config.UPLOAD_URL_EXPIRE_SECONDS),
    )
    logger.info(f"Signed upload URL issued: path={path}")
    return {"signedUrl": _signed_storage_url("upload", token), "path": path, "token": token}


def create_signed_url(path: str, expires_in: Optional[int] = None) -> str:
    """Short-lived download URL for one object path."""
    path = normalize_object_path(path)
    token = create_signed_token(
        {"path": path},
        STORAGE_DOWNLOAD_PURPOSE,
        timedelta(seconds=expires_in or config.SIGNED_URL_EXPIRE_SECONDS),
    )
    return _signed_storage_url("object", token)


def resolve_signed_token(token: str, purpose: str) -> str:
    """Object path granted by a signed token."""
    payload = decode_signed_token(token, purpose)
    if payload is None or not payload.get("path"):
        raise InvalidSignedUrlError()
    return normalize_object_path(payload["path"])


def _object_file(path: str) -> Path:
    return get_bucket_root() / normalize_object_path(path)


def check_upload_size(size: int) -> None:
    if size > config.MAX_UPLOAD_BYTES:
        raise ValueError(f"File exceeds maximum size of {config.MAX_UPLOAD_BYTES} bytes")


def write_object(path: str, data: bytes) -> int:
    """Store ``data`` at ``path``, replacing any previous object."""
    check_upload_size(len(data))

    target = _object_file(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    logger.info(f"Object stored: path={path}, size={len(data)}")
    return len(data)


def object_exists(path: str) -> bool:
    return _object_file(path).is_file()


def get_object_file(path: str) -> Path:
    target = _object_file(path)
    if not target.is_file():
        raise FileNotFoundError(path)
    return target


def delete_object(path: str) -> bool:
    """Remove an object; False if it did not exist."""
    target = _object_file(path)
    if not target.is_file():
        return False
    target.unlink()
    logger.info(f"Object deleted: path={path}")
    return True
