"""
Admin endpoints: recruiting events, recruiter accounts, students, résumés and
the end-of-event report. Every route requires the admin role.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, require_role
from app.core.errors import http_error_from
from app.db.models.app_user import AppUser, Role
from app.schemas.auth import ProfileResponse, MessageResponse, RecruiterInviteRequest
from app.schemas.event import (
    EventActionRequest,
    EventResponse,
    ActiveEventResponse,
    EventOverviewResponse,
    CloseEventResponse,
)
from app.schemas.report import ReportResponse, ReportKPIs
from app.schemas.student import (
    StudentFilter,
    StudentResponse,
    AdminStudentListResponse,
    PaginationInfo,
    ResumeUrlResponse,
)
from app.services import event_service, identity_service, report_service, student_service, storage_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])

require_admin = require_role(Role.ADMIN)


# ============================================
# ✅ RECRUITING EVENTS
# ============================================

@router.get("/event", response_model=EventOverviewResponse)
def get_events(
    admin: AppUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """All events, newest first, plus the active event with its student and interview counts."""
    try:
        overview = event_service.get_event_overview(db)
    except Exception as e:
        raise http_error_from(e, "list events")

    active = overview["active"]
    active_event = None
    if active is not None:
        active_event = ActiveEventResponse(
            **EventResponse.model_validate(active["event"]).model_dump(),
            student_count=active["studentCount"],
            interview_count=active["interviewCount"],
        )

    return EventOverviewResponse(
        events=[EventResponse.model_validate(event) for event in overview["events"]],
        active_event=active_event,
    )


@router.post("/event")
def manage_event(
    payload: EventActionRequest,
    admin: AppUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    ``{"name": ...}`` opens a new active event (closing any other);
    ``{"action": "close"}`` closes the active event.
    """
    try:
        if payload.action == "close":
            event = event_service.close_active_event(db)
            logger.info(f"Event closed by admin_id={admin.id}: event_id={event.id}")
            return CloseEventResponse(event=EventResponse.model_validate(event))

        event = event_service.create_event(db, payload.name)
        logger.info(f"Event created by admin_id={admin.id}: event_id={event.id}")
        return EventResponse.model_validate(event)
    except Exception as e:
        raise http_error_from(e, "update recruiting event")


# ============================================
# ✅ RECRUITERS
# ============================================

@router.get("/recruiters", response_model=list[ProfileResponse])
def get_recruiters(
    admin: AppUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        recruiters = identity_service.list_recruiters(db)
    except Exception as e:
        raise http_error_from(e, "list recruiters")
    return [ProfileResponse.model_validate(r) for r in recruiters]


@router.post("/recruiters", response_model=MessageResponse)
def invite_recruiter(
    payload: RecruiterInviteRequest,
    admin: AppUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Invite a new recruiter or promote an existing user. The invitation email is best effort."""
    try:
        _, message = identity_service.invite_recruiter(db, payload.email)
    except Exception as e:
        raise http_error_from(e, "invite recruiter")
    return MessageResponse(message=message)


@router.delete("/recruiters", response_model=MessageResponse)
def demote_recruiter(
    id: Optional[str] = Query(None, description="Recruiter profile ID"),
    admin: AppUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    if not id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User ID is required")

    try:
        identity_service.demote_recruiter(db, id)
    except Exception as e:
        raise http_error_from(e, "demote recruiter")
    return MessageResponse(message="Recruiter demoted to student")


# ============================================
# ✅ END-OF-EVENT REPORT
# ============================================

@router.post("/report", response_model=ReportResponse)
def close_event_with_report(
    admin: AppUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Email the active event's report and close the event.

    If the email cannot be sent the request fails and the event stays active.
    """
    try:
        event, kpis, recipient = report_service.close_event_and_report(db)
    except Exception as e:
        raise http_error_from(e, "generate report")

    logger.info(f"Report run by admin_id={admin.id}: event_id={event.id}")
    return ReportResponse(
        event=EventResponse.model_validate(event),
        kpis=ReportKPIs(**kpis),
        recipient=recipient,
    )


# ============================================
# ✅ STUDENTS
# ============================================

@router.get("/students", response_model=AdminStudentListResponse)
def list_students(
    query: Optional[str] = Query(None, description="Search name, email, university and degree"),
    university: Optional[str] = Query(None),
    degree: Optional[str] = Query(None),
    gpa_min: Optional[float] = Query(None, alias="gpaMin"),
    gpa_max: Optional[float] = Query(None, alias="gpaMax"),
    has_resume: Optional[bool] = Query(None, alias="hasResume"),
    event_id: Optional[str] = Query(None, alias="eventId"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    admin: AppUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    filters = StudentFilter(
        query=query,
        university=university,
        degree=degree,
        gpa_min=gpa_min,
        gpa_max=gpa_max,
        has_resume=has_resume,
        event_id=event_id,
        page=page,
        page_size=page_size,
    )

    try:
        students, total = student_service.list_students(db, filters)
    except Exception as e:
        raise http_error_from(e, "list students")

    return AdminStudentListResponse(
        students=[StudentResponse.model_validate(s) for s in students],
        pagination=PaginationInfo(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=student_service.total_pages(total, page_size),
        ),
    )


@router.delete("/students", response_model=MessageResponse)
def delete_student(
    id: Optional[str] = Query(None, description="Student ID"),
    admin: AppUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a student with their interviews, profile and identity record."""
    if not id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Student ID is required")

    try:
        student_service.delete_student(db, id)
    except Exception as e:
        raise http_error_from(e, "delete student")

    logger.info(f"Student deleted by admin_id={admin.id}: student_id={id}")
    return MessageResponse(message="Student deleted successfully")


@router.get("/resume-url", response_model=ResumeUrlResponse)
def get_resume_url(
    path: Optional[str] = Query(None, description="Résumé storage path"),
    admin: AppUser = Depends(require_admin)
):
    """Signed résumé download URL, valid for five minutes."""
    if not path:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Resume path is required")

    try:
        url = storage_service.create_signed_url(path)
    except Exception as e:
        raise http_error_from(e, "create resume download URL")
    return ResumeUrlResponse(url=url)
