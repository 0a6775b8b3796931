"""
Application intake and student administration.

A student has one application row keyed by their profile id. Every submission
overwrites it and moves it to the currently active event.
"""
import logging
import math
from typing import Tuple, List, Dict

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, Query

from app.db.models.app_user import AppUser
from app.db.models.auth_user import AuthUser
from app.db.models.student import Student
from app.db.models.interview import Interview
from app.schemas.student import StudentSubmit, StudentFilter
from app.services import storage_service
from app.services.event_service import require_active_event

logger = logging.getLogger(__name__)


class ApplicationNotFoundError(LookupError):
    def __init__(self, message: str = "No application found"):
        super().__init__(message)


class StudentNotFoundError(LookupError):
    def __init__(self, message: str = "Student not found"):
        super().__init__(message)


def validate_resume_path(app_user: AppUser, resume_path: str) -> str:
    """
    A résumé path may only be recorded once its upload has landed in storage,
    and only under the submitting student's own prefix.
    """
    path = storage_service.normalize_object_path(resume_path)
    if not storage_service.is_owned_resume_path(app_user.id, path):
        raise ValueError("Resume path does not belong to this student")
    if not storage_service.object_exists(path):
        raise ValueError("Resume upload not found - upload the file before submitting")
    return path


def submit_application(db: Session, app_user: AppUser, data: StudentSubmit) -> Student:
    """
    Create or overwrite the caller's application in the active event.

    Raises:
        NoActiveEventError: No event is accepting applications
        ValueError: Invalid résumé path
    """
    event = require_active_event(db)

    resume_path = validate_resume_path(app_user, data.resume_path) if data.resume_path else None

    fields = {
        "event_id": event.id,
        "full_name": data.full_name,
        "email": str(data.email),
        "university": data.university,
        "phone": data.phone or None,
        "degree": data.degree or None,
        "gpa": data.gpa,
        "resume_path": resume_path,
    }

    student_id = app_user.id

    try:
        student = db.query(Student).filter(Student.id == student_id).first()
        created = student is None
        if created:
            student = Student(id=student_id, **fields)
            db.add(student)
            try:
                db.commit()
            except IntegrityError:
                # A concurrent submission created the row first; overwrite it
                db.rollback()
                logger.warning(f"Concurrent application submit: student_id={student_id}")
                student = db.query(Student).filter(Student.id == student_id).first()
                if student is None:
                    raise
                created = False

        if not created:
            for key, value in fields.items():
                setattr(student, key, value)
            db.commit()

        db.refresh(student)
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Application {'submitted' if created else 'updated'}: student_id={student_id}, "
        f"event_id={fields['event_id']}, has_resume={resume_path is not None}"
    )
    return student


def get_application(db: Session, app_user: AppUser) -> Student:
    student = db.query(Student).filter(Student.id == app_user.id).first()
    if student is None:
        raise ApplicationNotFoundError()
    return student


def create_resume_upload(app_user: AppUser, filename: str) -> Dict[str, str]:
    """Upload credential for a new résumé file owned by ``app_user``."""
    path = storage_service.build_resume_path(app_user.id, filename)
    return storage_service.create_signed_upload_url(path)


LIKE_ESCAPE = "\\"


def contains_pattern(value: str) -> str:
    """Substring LIKE pattern in which ``%`` and ``_`` match literally."""
    escaped = (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def apply_student_filters(query: Query, filters: StudentFilter) -> Query:
    """
    Apply listing filters to a Student query.

    Listing and counting both go through here so the total always matches
    the filtered rows.
    """
    if filters.event_id:
        query = query.filter(Student.event_id == filters.event_id)

    if filters.query:
        term = contains_pattern(filters.query)
        query = query.filter(
            or_(
                Student.full_name.ilike(term, escape=LIKE_ESCAPE),
                Student.email.ilike(term, escape=LIKE_ESCAPE),
                Student.university.ilike(term, escape=LIKE_ESCAPE),
                Student.degree.ilike(term, escape=LIKE_ESCAPE),
            )
        )

    if filters.university:
        query = query.filter(Student.university.ilike(contains_pattern(filters.university), escape=LIKE_ESCAPE))

    if filters.degree:
        query = query.filter(Student.degree.ilike(contains_pattern(filters.degree), escape=LIKE_ESCAPE))

    if filters.gpa_min is not None:
        query = query.filter(Student.gpa >= filters.gpa_min)

    if filters.gpa_max is not None:
        query = query.filter(Student.gpa <= filters.gpa_max)

    if filters.has_resume is True:
        query = query.filter(Student.resume_path.isnot(None))
    elif filters.has_resume is False:
        query = query.filter(Student.resume_path.is_(None))

    return query


def list_students(db: Session, filters: StudentFilter) -> Tuple[List[Student], int]:
    """Filtered page of students (newest first) and the filtered total."""
    query = apply_student_filters(db.query(Student), filters)

    total = query.count()

    offset = (filters.page - 1) * filters.page_size
    students = (
        query.order_by(Student.created_at.desc())
        .offset(offset)
        .limit(filters.page_size)
        .all()
    )
    return students, total


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size else 0


def get_student(db: Session, student_id: str) -> Student:
    student = db.query(Student).filter(Student.id == student_id).first()
    if student is None:
        raise StudentNotFoundError()
    return student


def delete_student(db: Session, student_id: str) -> None:
    """
    Delete a student and everything that belongs to them: interviews about
    them, the application, the profile and the identity record.
    """
    student = get_student(db, student_id)
    resume_path = student.resume_path

    app_user = db.query(AppUser).filter(AppUser.id == student.id).first()
    auth_user_id = app_user.auth_user_id if app_user else None

    try:
        interviews = (
            db.query(Interview)
            .filter(or_(Interview.student_id == student.id, Interview.recruiter_id == student.id))
            .all()
        )
        for interview in interviews:
            db.delete(interview)
        db.flush()
        db.delete(student)
        db.flush()

        if app_user is not None:
            db.delete(app_user)
            db.flush()
        if auth_user_id is not None:
            db.query(AuthUser).filter(AuthUser.id == auth_user_id).delete(synchronize_session=False)

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Student deleted: student_id={student_id}, interviews_removed={len(interviews)}")

    if resume_path:
        try:
            storage_service.delete_object(resume_path)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to remove resume for deleted student_id={student_id}: {e}")
