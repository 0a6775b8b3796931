"""
Identity and role management.

Covers the magic-link sign-in flow, lazy profile provisioning, and the admin
operations that change a principal's role (invite/promote, demote).
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Tuple, List
from urllib.parse import urlencode

from sqlalchemy.orm import Session, joinedload

from app.core import config
from app.core.security import create_access_token, create_magic_link_code, verify_magic_link_code
from app.db.base import utcnow, as_utc
from app.db.models.auth_user import AuthUser
from app.db.models.app_user import AppUser, Role
from app.services import email_service

logger = logging.getLogger(__name__)


class InvalidLoginCodeError(ValueError):
    def __init__(self, message: str = "Invalid or expired login link"):
        super().__init__(message)


class RecruiterNotFoundError(LookupError):
    pass


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def safe_next_path(next_path: Optional[str]) -> str:
    """Only same-site relative redirects are honoured."""
    if not next_path or not next_path.startswith("/") or next_path.startswith("//") or "\\" in next_path:
        return "/"
    return next_path


def get_auth_user_by_email(db: Session, email: str) -> Optional[AuthUser]:
    return db.query(AuthUser).filter(AuthUser.email == normalize_email(email)).first()


def get_or_create_auth_user(db: Session, email: str, confirmed: bool = False) -> Tuple[AuthUser, bool]:
    """Identity record for ``email``; the flag is True when it was just created (not committed)."""
    auth_user = get_auth_user_by_email(db, email)
    if auth_user:
        return auth_user, False

    auth_user = AuthUser(
        email=normalize_email(email),
        email_confirmed_at=utcnow() if confirmed else None,
    )
    db.add(auth_user)
    db.flush()
    logger.info(f"Identity created: auth_user_id={auth_user.id}")
    return auth_user, True


def ensure_app_user(db: Session, auth_user: AuthUser, role: Role = Role.STUDENT) -> AppUser:
    """
    Profile for ``auth_user``, created with ``role`` if missing.

    An existing profile keeps its role; role changes go through
    invite_recruiter / demote_recruiter / set_role.
    """
    app_user = db.query(AppUser).filter(AppUser.auth_user_id == auth_user.id).first()
    if app_user:
        return app_user

    app_user = AppUser(auth_user_id=auth_user.id, role=role)
    db.add(app_user)
    db.flush()
    logger.info(f"Profile provisioned: app_user_id={app_user.id}, role={role.value}")
    return app_user


def build_magic_link(code: str, next_path: str) -> str:
    query = urlencode({"code": code, "next": safe_next_path(next_path)})
    return f"{config.API_URL}/api/auth/callback?{query}"


def request_magic_link(db: Session, email: str, next_path: Optional[str] = None) -> AuthUser:
    """
    Email a sign-in link, creating the identity record on first use.

    Email failures propagate: without the email the caller cannot sign in.
    """
    try:
        auth_user, created = get_or_create_auth_user(db, email)
        db.commit()
    except Exception:
        db.rollback()
        raise

    code = create_magic_link_code(auth_user.id, auth_user.email)
    email_service.send_magic_link_email(auth_user.email, build_magic_link(code, next_path))
    logger.info(f"Magic link sent: auth_user_id={auth_user.id}, new_identity={created}")
    return auth_user


def exchange_code_for_session(db: Session, code: str) -> Tuple[AppUser, str]:
    """
    Trade a magic link code for a session token.

    The code is single-use: it must have been issued after the identity's
    last sign-in. The profile is provisioned as a student on first sign-in.
    """
    payload = verify_magic_link_code(code)
    if payload is None:
        raise InvalidLoginCodeError()

    auth_user = db.query(AuthUser).filter(AuthUser.id == payload["sub"]).first()
    if auth_user is None:
        raise InvalidLoginCodeError()

    issued_at = payload.get("issued_at")
    last_sign_in = as_utc(auth_user.last_sign_in_at)
    if issued_at is None or (last_sign_in is not None and issued_at <= last_sign_in.timestamp()):
        raise InvalidLoginCodeError("Login link has already been used")

    try:
        now = datetime.now(timezone.utc)
        auth_user.last_sign_in_at = now
        if auth_user.email_confirmed_at is None:
            auth_user.email_confirmed_at = now
        app_user = ensure_app_user(db, auth_user)
        db.commit()
        db.refresh(app_user)
    except Exception:
        db.rollback()
        raise

    token = create_access_token({"sub": auth_user.id})
    logger.info(f"Session issued: app_user_id={app_user.id}, role={Role(app_user.role).value}")
    return app_user, token


def list_recruiters(db: Session) -> List[AppUser]:
    """Recruiter profiles with their identity, newest first."""
    return (
        db.query(AppUser)
        .options(joinedload(AppUser.auth_user))
        .filter(AppUser.role == Role.RECRUITER)
        .order_by(AppUser.created_at.desc())
        .all()
    )


def invite_recruiter(db: Session, email: str) -> Tuple[AppUser, str]:
    """
    Create a recruiter account, or promote an existing user to recruiter.

    The invitation email is best effort: the account change stands even if
    the email cannot be sent.
    """
    try:
        auth_user, created = get_or_create_auth_user(db, email, confirmed=True)
        app_user = ensure_app_user(db, auth_user, role=Role.RECRUITER)

        if Role(app_user.role) == Role.ADMIN:
            raise ValueError("User is already an admin")

        app_user.role = Role.RECRUITER
        db.commit()
        db.refresh(app_user)
    except Exception:
        db.rollback()
        raise

    message = "Recruiter invited successfully" if created else "User promoted to recruiter"
    logger.info(f"{message}: app_user_id={app_user.id}")

    try:
        email_service.send_recruiter_invite_email(auth_user.email)
    except Exception as e:
        logger.error(f"Recruiter invite email failed for app_user_id={app_user.id}: {e}", exc_info=True)

    return app_user, message


def demote_recruiter(db: Session, app_user_id: str) -> AppUser:
    """Revert a recruiter to student."""
    app_user = (
        db.query(AppUser)
        .filter(AppUser.id == app_user_id, AppUser.role == Role.RECRUITER)
        .first()
    )
    if app_user is None:
        raise RecruiterNotFoundError("Recruiter not found")

    try:
        app_user.role = Role.STUDENT
        db.commit()
        db.refresh(app_user)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Recruiter demoted to student: app_user_id={app_user.id}")
    return app_user


def set_role(db: Session, email: str, role: Role) -> AppUser:
    """Assign ``role`` to the user with ``email``, creating the account if needed."""
    try:
        auth_user, _ = get_or_create_auth_user(db, email, confirmed=True)
        app_user = ensure_app_user(db, auth_user, role=role)
        app_user.role = role
        db.commit()
        db.refresh(app_user)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Role set: app_user_id={app_user.id}, role={role.value}")
    return app_user
