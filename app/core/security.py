import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError
from app.core import config

logger = logging.getLogger(__name__)

_DEV_SECRET_KEY = "dev-secret-key-change-in-production"

# Token purposes; a token minted for one purpose is never accepted for another
ACCESS_PURPOSE = "access"
MAGIC_LINK_PURPOSE = "magic_link"
STORAGE_UPLOAD_PURPOSE = "storage_upload"
STORAGE_DOWNLOAD_PURPOSE = "storage_download"


def get_secret_key() -> str:
    if config.SECRET_KEY:
        return config.SECRET_KEY
    logger.warning("SECRET_KEY not configured - using development key")
    return _DEV_SECRET_KEY


def create_signed_token(data: dict, purpose: str, expires_delta: timedelta) -> str:
    """Sign ``data`` as a JWT bound to ``purpose`` that expires after ``expires_delta``."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "purpose": purpose})
    return jwt.encode(to_encode, get_secret_key(), algorithm=config.ALGORITHM)


def decode_signed_token(token: str, purpose: str) -> Optional[dict]:
    """
    Decode and validate a signed token.

    Returns the payload, or None if the token is malformed, expired, or was
    minted for a different purpose.
    """
    try:
        payload = jwt.decode(token, get_secret_key(), algorithms=[config.ALGORITHM])
    except JWTError:
        return None

    if payload.get("purpose") != purpose:
        return None
    return payload


def create_access_token(data: dict, expires_delta: timedelta = None):
    return create_signed_token(
        data,
        ACCESS_PURPOSE,
        expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_magic_link_code(auth_user_id: str, email: str) -> str:
    """
    Login code embedded in the emailed magic link.

    ``issued_at`` lets the callback reject codes older than the last sign-in,
    which makes each code single-use.
    """
    issued_at = datetime.now(timezone.utc).timestamp()
    return create_signed_token(
        {"sub": auth_user_id, "email": email, "issued_at": issued_at},
        MAGIC_LINK_PURPOSE,
        timedelta(minutes=config.MAGIC_LINK_EXPIRE_MINUTES),
    )


def verify_magic_link_code(code: str) -> Optional[dict]:
    """Return the payload of a valid magic link code, or None if invalid."""
    payload = decode_signed_token(code, MAGIC_LINK_PURPOSE)
    if payload is None or not payload.get("sub"):
        return None
    return payload
