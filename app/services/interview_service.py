"""
Interview ratings and the recruiter's view of the active event.

Each recruiter holds at most one rating per student per event; saving again
overwrites it.
"""
import logging
from typing import Optional, Tuple, List, Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models.app_user import AppUser
from app.db.models.interview import Interview
from app.db.models.student import Student
from app.schemas.interview import InterviewCreate
from app.schemas.student import StudentFilter
from app.services import storage_service
from app.services.event_service import get_active_event, require_active_event
from app.services.report_service import build_student_rows
from app.services.student_service import apply_student_filters, get_student

logger = logging.getLogger(__name__)


class StudentNotInEventError(ValueError):
    def __init__(self, message: str = "Student not found in active event"):
        super().__init__(message)


def _find_interview(db: Session, event_id: str, student_id: str, recruiter_id: str) -> Optional[Interview]:
    return (
        db.query(Interview)
        .filter(
            Interview.event_id == event_id,
            Interview.student_id == student_id,
            Interview.recruiter_id == recruiter_id,
        )
        .first()
    )


def record_interview(db: Session, recruiter: AppUser, data: InterviewCreate) -> Interview:
    """
    Save the recruiter's rating of a student in the active event.

    Raises:
        NoActiveEventError: No active event
        StudentNotInEventError: The student did not apply to the active event
    """
    event = require_active_event(db)

    student = (
        db.query(Student)
        .filter(Student.id == data.student_id, Student.event_id == event.id)
        .first()
    )
    if student is None:
        raise StudentNotInEventError()

    event_id, student_id, recruiter_id = event.id, student.id, recruiter.id
    ratings = {
        "rating_overall": data.rating_overall,
        "rating_tech": data.rating_tech,
        "rating_comm": data.rating_comm,
        "feedback": data.feedback,
    }

    try:
        interview = _find_interview(db, event_id, student_id, recruiter_id)
        created = interview is None
        if created:
            interview = Interview(
                event_id=event_id,
                student_id=student_id,
                recruiter_id=recruiter_id,
                **ratings,
            )
            db.add(interview)
            try:
                db.commit()
            except IntegrityError:
                # A concurrent save of the same rating won the insert; overwrite it
                db.rollback()
                logger.warning(
                    f"Concurrent interview save: event_id={event_id}, "
                    f"student_id={student_id}, recruiter_id={recruiter_id}"
                )
                interview = _find_interview(db, event_id, student_id, recruiter_id)
                if interview is None:
                    raise
                created = False

        if not created:
            for key, value in ratings.items():
                setattr(interview, key, value)
            db.commit()

        db.refresh(interview)
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Interview {'recorded' if created else 'updated'}: interview_id={interview.id}, "
        f"event_id={event_id}, student_id={student_id}, recruiter_id={recruiter_id}"
    )
    return interview


def get_recruiter_interviews(
    db: Session, recruiter_id: str, event_id: str, student_ids: List[str]
) -> Dict[str, Interview]:
    """The recruiter's own interviews for the given students, keyed by student id."""
    if not student_ids:
        return {}

    interviews = (
        db.query(Interview)
        .filter(
            Interview.recruiter_id == recruiter_id,
            Interview.event_id == event_id,
            Interview.student_id.in_(student_ids),
        )
        .all()
    )
    return {interview.student_id: interview for interview in interviews}


def list_students_for_recruiter(
    db: Session, recruiter: AppUser, filters: StudentFilter
) -> Tuple[List[Tuple[Student, Optional[Interview]]], int]:
    """
    Filtered page of the active event's students, each paired with the
    calling recruiter's own interview (or None).

    With no active event the result is empty rather than an error.
    """
    event = get_active_event(db)
    if event is None:
        return [], 0

    filters = filters.model_copy(update={"event_id": event.id})
    query = apply_student_filters(db.query(Student), filters)

    total = query.count()

    offset = (filters.page - 1) * filters.page_size
    students = (
        query.order_by(Student.created_at.desc())
        .offset(offset)
        .limit(filters.page_size)
        .all()
    )

    own = get_recruiter_interviews(db, recruiter.id, event.id, [s.id for s in students])
    return [(student, own.get(student.id)) for student in students], total


def list_student_summaries(
    db: Session, filters: StudentFilter
) -> Tuple[List[Tuple[Student, Dict[str, Any]]], int]:
    """
    Filtered page of the active event's students, each paired with its
    interview aggregates across every recruiter (count, per-dimension means
    and latest feedback).

    Raises:
        NoActiveEventError: No active event
    """
    event = require_active_event(db)

    filters = filters.model_copy(update={"event_id": event.id})
    query = apply_student_filters(db.query(Student), filters)

    total = query.count()

    offset = (filters.page - 1) * filters.page_size
    students = (
        query.order_by(Student.created_at.desc())
        .offset(offset)
        .limit(filters.page_size)
        .all()
    )

    interviews = []
    if students:
        interviews = (
            db.query(Interview)
            .filter(
                Interview.event_id == event.id,
                Interview.student_id.in_([s.id for s in students]),
            )
            .all()
        )

    rows = build_student_rows(event, students, interviews)
    return list(zip(students, rows)), total


def get_latest_interview_by(db: Session, recruiter_id: str, student_id: str) -> Optional[Interview]:
    return (
        db.query(Interview)
        .filter(Interview.student_id == student_id, Interview.recruiter_id == recruiter_id)
        .order_by(Interview.updated_at.desc())
        .first()
    )


def get_student_detail(
    db: Session, recruiter: AppUser, student_id: str, signed_resume: bool = False
) -> Tuple[Student, Optional[Interview], Optional[str]]:
    """
    One student with the caller's latest rating and, on request, a short-lived
    résumé download URL.
    """
    student = get_student(db, student_id)
    latest = get_latest_interview_by(db, recruiter.id, student.id)

    resume_url = None
    if signed_resume and student.resume_path:
        resume_url = storage_service.create_signed_url(student.resume_path)

    return student, latest, resume_url
