"""
Event-wide student listing with interview aggregates from every recruiter.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, require_role
from app.core.errors import http_error_from
from app.db.models.app_user import AppUser, Role
from app.schemas.interview import StudentSummaryItem, StudentSummaryListResponse
from app.schemas.student import StudentFilter, StudentResponse
from app.services.interview_service import list_student_summaries

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/students", tags=["Students"])


@router.get("", response_model=StudentSummaryListResponse)
def list_students_with_summaries(
    query: Optional[str] = Query(None, description="Search name, email, university and degree"),
    university: Optional[str] = Query(None),
    degree: Optional[str] = Query(None),
    gpa_min: Optional[float] = Query(None, alias="gpaMin"),
    gpa_max: Optional[float] = Query(None, alias="gpaMax"),
    has_resume: Optional[bool] = Query(None, alias="hasResume"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    user: AppUser = Depends(require_role(Role.RECRUITER)),
    db: Session = Depends(get_db)
):
    """400 when no event is active."""
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
        pairs, total = list_student_summaries(db, filters)
    except Exception as e:
        raise http_error_from(e, "list student summaries")

    items = [
        StudentSummaryItem(
            **StudentResponse.model_validate(student).model_dump(),
            interviews_count=row["interviews_count"],
            avg_overall=row["avg_overall"],
            avg_tech=row["avg_tech"],
            avg_comm=row["avg_comm"],
            latest_feedback=row["latest_feedback"],
            has_interview=row["interviews_count"] > 0,
        )
        for student, row in pairs
    ]
    return StudentSummaryListResponse(items=items, total=total, page=page, page_size=page_size)
