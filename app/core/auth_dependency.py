from typing import Optional
from fastapi import Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from app.core.gating import enforce_role, enforce_exact_role
from app.core.security import decode_signed_token, ACCESS_PURPOSE
from app.db.session import SessionLocal
from app.db.models.app_user import AppUser, Role

SESSION_COOKIE_NAME = "access_token"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth", auto_error=False)


def get_db():
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_token(request: Request, token: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    """Bearer token from the Authorization header, else the session cookie."""
    return token or request.cookies.get(SESSION_COOKIE_NAME)


def resolve_app_user(token: Optional[str], db: Session) -> Optional[AppUser]:
    """Map a session token to the caller's profile; None when it cannot be resolved."""
    if not token:
        return None

    payload = decode_signed_token(token, ACCESS_PURPOSE)
    if payload is None or not payload.get("sub"):
        return None

    return db.query(AppUser).filter(AppUser.auth_user_id == payload["sub"]).first()


def get_current_user_optional(
    token: Optional[str] = Depends(get_token),
    db: Session = Depends(get_db)
) -> Optional[AppUser]:
    """Current profile, or None for anonymous callers."""
    return resolve_app_user(token, db)


def get_current_user(
    token: Optional[str] = Depends(get_token),
    db: Session = Depends(get_db)
) -> AppUser:
    """Current profile; 401 when the caller is not signed in or has no profile."""
    if not token:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = resolve_app_user(token, db)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_role(min_role: Role):
    """
    Dependency factory enforcing a minimum role.

    Returns:
        Dependency resolving to the caller's AppUser

    Raises:
        HTTPException 401: Not signed in
        HTTPException 403: Role ranks below ``min_role``
    """
    def role_checker(user: AppUser = Depends(get_current_user)) -> AppUser:
        enforce_role(user, min_role)
        return user

    return role_checker


def require_student(user: AppUser = Depends(get_current_user)) -> AppUser:
    """Student-only routes: recruiters and admins are refused too."""
    enforce_exact_role(user, Role.STUDENT, detail="Only students can access applications")
    return user
