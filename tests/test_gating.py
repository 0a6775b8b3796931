"""
Tests for role gating and signed tokens.
"""
from datetime import timedelta

import pytest
from fastapi import HTTPException

from app.core.gating import get_role_rank, has_role, enforce_role, enforce_exact_role
from app.core.security import (
    ACCESS_PURPOSE,
    MAGIC_LINK_PURPOSE,
    create_access_token,
    create_magic_link_code,
    create_signed_token,
    decode_signed_token,
    verify_magic_link_code,
)
from app.db.models import AppUser, Role


def _user(role: Role) -> AppUser:
    return AppUser(id="user-id", auth_user_id="auth-id", role=role)


def test_role_order():
    assert get_role_rank(Role.STUDENT) < get_role_rank(Role.RECRUITER) < get_role_rank(Role.ADMIN)
    assert get_role_rank("unknown") == 0


@pytest.mark.parametrize("role,min_role,allowed", [
    (Role.STUDENT, Role.STUDENT, True),
    (Role.STUDENT, Role.RECRUITER, False),
    (Role.RECRUITER, Role.RECRUITER, True),
    (Role.ADMIN, Role.RECRUITER, True),
    (Role.RECRUITER, Role.ADMIN, False),
])
def test_has_role(role, min_role, allowed):
    assert has_role(_user(role), min_role) is allowed


def test_enforce_role_raises_forbidden():
    with pytest.raises(HTTPException) as exc_info:
        enforce_role(_user(Role.STUDENT), Role.ADMIN)
    assert exc_info.value.status_code == 403


def test_enforce_exact_role_refuses_higher_roles():
    enforce_exact_role(_user(Role.STUDENT), Role.STUDENT)
    with pytest.raises(HTTPException) as exc_info:
        enforce_exact_role(_user(Role.ADMIN), Role.STUDENT, detail="Students only")
    assert exc_info.value.detail == "Students only"


def test_token_purpose_is_enforced():
    token = create_access_token({"sub": "auth-id"})

    assert decode_signed_token(token, ACCESS_PURPOSE)["sub"] == "auth-id"
    assert decode_signed_token(token, MAGIC_LINK_PURPOSE) is None
    assert verify_magic_link_code(token) is None


def test_expired_token_rejected():
    token = create_signed_token({"sub": "auth-id"}, ACCESS_PURPOSE, timedelta(seconds=-1))

    assert decode_signed_token(token, ACCESS_PURPOSE) is None


def test_magic_link_code_payload():
    payload = verify_magic_link_code(create_magic_link_code("auth-id", "jane.doe@university.edu"))

    assert payload["sub"] == "auth-id"
    assert payload["email"] == "jane.doe@university.edu"
    assert isinstance(payload["issued_at"], float)


def test_sanitize_log_data_redacts_secrets():
    from app.core.logging_config import sanitize_log_data

    sanitized = sanitize_log_data({
        "database_url": "postgresql://user:pw@db/recruiting",
        "smtp_password": "hunter2",
        "app_url": "http://localhost:3000",
        "report_receiver_email": "reports@company.com",
        "smtp": {"password": "hunter2"},
    })

    assert sanitized["database_url"] == "***REDACTED***"
    assert sanitized["smtp_password"] == "***REDACTED***"
    assert sanitized["app_url"] == "http://localhost:3000"
    assert sanitized["report_receiver_email"] == "r***@company.com"
    assert sanitized["smtp"] == {"password": "***REDACTED***"}
