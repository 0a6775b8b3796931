"""
Interview rating endpoint, served under both the legacy and recruiter paths.
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, require_role
from app.core.errors import http_error_from
from app.db.models.app_user import AppUser, Role
from app.schemas.interview import InterviewCreate, InterviewResponse, InterviewSaveResponse
from app.services.interview_service import record_interview

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Interview"])


@router.post("/api/interview", response_model=InterviewSaveResponse)
@router.post("/api/recruiter/interview", response_model=InterviewSaveResponse)
def save_interview(
    payload: InterviewCreate,
    user: AppUser = Depends(require_role(Role.RECRUITER)),
    db: Session = Depends(get_db)
):
    """
    Rate a student in the active event. Saving again overwrites the caller's
    earlier rating of the same student.
    """
    try:
        interview = record_interview(db, user, payload)
    except Exception as e:
        raise http_error_from(e, "save interview")

    return InterviewSaveResponse(
        message="Interview saved successfully",
        interview=InterviewResponse.model_validate(interview),
    )
