"""
Role gating.

Roles form a total order: student < recruiter < admin. A route declares the
minimum role it needs; callers ranked below it are refused with 403.
"""
import logging
from fastapi import HTTPException, status
from app.db.models.app_user import AppUser, Role

logger = logging.getLogger(__name__)

ROLE_HIERARCHY = {
    Role.STUDENT: 1,
    Role.RECRUITER: 2,
    Role.ADMIN: 3,
}


def get_role_rank(role) -> int:
    """Rank of a role; unknown roles rank below every real one."""
    try:
        return ROLE_HIERARCHY[Role(role)]
    except ValueError:
        return 0


def has_role(user: AppUser, min_role: Role) -> bool:
    return get_role_rank(user.role) >= get_role_rank(min_role)


def enforce_role(user: AppUser, min_role: Role) -> None:
    """Raise 403 unless the user's role ranks at least ``min_role``."""
    if has_role(user, min_role):
        return

    logger.warning(f"Role check failed: app_user_id={user.id}, role={Role(user.role).value}, required={min_role.value}")
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Forbidden"
    )


def enforce_exact_role(user: AppUser, role: Role, detail: str = "Forbidden") -> None:
    """Raise 403 unless the user holds exactly ``role``."""
    if Role(user.role) == role:
        return

    logger.warning(f"Role check failed: app_user_id={user.id}, role={Role(user.role).value}, required exactly {role.value}")
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=detail
    )
