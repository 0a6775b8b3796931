"""
Student application endpoints.
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, require_student
from app.core.errors import http_error_from
from app.db.models.app_user import AppUser
from app.schemas.student import StudentSubmit, StudentResponse
from app.services.student_service import submit_application, get_application

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/student", tags=["Student"])


@router.get("", response_model=StudentResponse)
def get_my_application(
    user: AppUser = Depends(require_student),
    db: Session = Depends(get_db)
):
    """The caller's application. 404 until they have applied."""
    try:
        return get_application(db, user)
    except Exception as e:
        raise http_error_from(e, "fetch application")


@router.post("", response_model=StudentResponse)
def submit_my_application(
    payload: StudentSubmit,
    user: AppUser = Depends(require_student),
    db: Session = Depends(get_db)
):
    """
    Create or overwrite the caller's application in the active event.

    Returns 400 when no event is active.
    """
    try:
        return submit_application(db, user, payload)
    except Exception as e:
        raise http_error_from(e, "submit application")
