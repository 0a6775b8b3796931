"""
Magic-link authentication endpoints.

Sign-in is passwordless: POST /api/auth emails a one-time link, and the link's
callback exchanges its code for a session cookie.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.core import config
from app.core.auth_dependency import get_db, get_current_user_optional, SESSION_COOKIE_NAME
from app.core.errors import http_error_from
from app.db.models.app_user import AppUser
from app.schemas.auth import MagicLinkRequest, MeResponse, ProfileResponse, MessageResponse
from app.services.identity_service import (
    request_magic_link,
    exchange_code_for_session,
    safe_next_path,
    InvalidLoginCodeError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _frontend_redirect(path: str) -> RedirectResponse:
    return RedirectResponse(url=f"{config.APP_URL}{path}", status_code=303)


@router.post("", response_model=MessageResponse)
def send_login_link(
    payload: MagicLinkRequest,
    db: Session = Depends(get_db)
):
    """Email a sign-in link to ``email``. New addresses get an account on first use."""
    try:
        request_magic_link(db, payload.email, payload.next)
    except Exception as e:
        raise http_error_from(e, "send login link")

    return MessageResponse(message="Check your email for the sign-in link")


@router.get("/callback")
def auth_callback(
    code: Optional[str] = Query(None),
    next: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    """
    Exchange a magic-link code for a session.

    Provisions a student profile on first sign-in, sets the session cookie and
    redirects to ``next``. Failures redirect to the login page with an error code.
    """
    if not code:
        return _frontend_redirect("/login?error=no_code")

    try:
        _, token = exchange_code_for_session(db, code)
    except InvalidLoginCodeError as e:
        logger.warning(f"Auth callback rejected: {e}")
        return _frontend_redirect("/login?error=auth_callback_error")
    except Exception as e:
        logger.error(f"Auth callback error: {e}", exc_info=True)
        return _frontend_redirect("/login?error=auth_callback_error")

    response = _frontend_redirect(safe_next_path(next))
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=config.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=config.APP_URL.startswith("https"),
    )
    return response


@router.get("/me", response_model=MeResponse)
def get_me(user: Optional[AppUser] = Depends(get_current_user_optional)):
    """Current profile, or ``{"user": null}`` when signed out."""
    if user is None:
        return MeResponse(user=None)
    return MeResponse(user=ProfileResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME)
    return MessageResponse(message="Signed out")
