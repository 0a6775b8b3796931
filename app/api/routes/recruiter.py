"""
Recruiter views of the active event's students.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, require_role
from app.core.errors import http_error_from
from app.db.models.app_user import AppUser, Role
from app.schemas.interview import (
    InterviewSummary,
    RecruiterStudentItem,
    RecruiterStudentListResponse,
    RecruiterStudentDetail,
)
from app.schemas.student import StudentFilter, StudentResponse
from app.services.interview_service import list_students_for_recruiter, get_student_detail

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recruiter", tags=["Recruiter"])

require_recruiter = require_role(Role.RECRUITER)


def _summary(interview) -> Optional[InterviewSummary]:
    if interview is None:
        return None
    return InterviewSummary.model_validate(interview)


@router.get("/students", response_model=RecruiterStudentListResponse)
def list_event_students(
    query: Optional[str] = Query(None, description="Search name, email, university and degree"),
    university: Optional[str] = Query(None),
    degree: Optional[str] = Query(None),
    gpa_min: Optional[float] = Query(None, alias="gpaMin"),
    gpa_max: Optional[float] = Query(None, alias="gpaMax"),
    has_resume: Optional[bool] = Query(None, alias="hasResume"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    user: AppUser = Depends(require_recruiter),
    db: Session = Depends(get_db)
):
    """
    Students of the active event with the caller's own rating of each.

    Empty when no event is active.
    """
    filters = StudentFilter(
        query=query,
        university=university,
        degree=degree,
        gpa_min=gpa_min,
        gpa_max=gpa_max,
        has_resume=has_resume,
        page=page,
        page_size=page_size,
    )

    try:
        pairs, total = list_students_for_recruiter(db, user, filters)
    except Exception as e:
        raise http_error_from(e, "list students")

    items = [
        RecruiterStudentItem(
            **StudentResponse.model_validate(student).model_dump(),
            has_interview=interview is not None,
            latest_interview=_summary(interview),
        )
        for student, interview in pairs
    ]
    return RecruiterStudentListResponse(items=items, total=total, page=page, page_size=page_size)


@router.get("/student/{student_id}", response_model=RecruiterStudentDetail)
def get_event_student(
    student_id: str,
    signed_resume: bool = Query(False, alias="signedResume", description="Include a signed résumé URL"),
    user: AppUser = Depends(require_recruiter),
    db: Session = Depends(get_db)
):
    try:
        student, latest, resume_url = get_student_detail(db, user, student_id, signed_resume)
    except Exception as e:
        raise http_error_from(e, "fetch student")

    return RecruiterStudentDetail(
        **StudentResponse.model_validate(student).model_dump(),
        latest_interview=_summary(latest),
        resume_url=resume_url,
    )
