"""
Tests for application intake, student listings and student deletion.
"""
from datetime import timedelta

import pytest
from pydantic import ValidationError
from sqlalchemy import event as sa_event

from app.db.models import AuthUser, AppUser, Interview, Student, Role
from app.schemas.student import StudentSubmit, StudentFilter
from app.services import storage_service
from app.services.event_service import NoActiveEventError, create_event
from app.services.student_service import (
    ApplicationNotFoundError,
    StudentNotFoundError,
    submit_application,
    get_application,
    list_students,
    delete_student,
    total_pages,
    contains_pattern,
)
from conftest import TestSessionLocal, create_user, create_application, store_resume


def _submission(**overrides):
    data = {
        "full_name": "Jane Doe",
        "email": "jane.doe@university.edu",
        "university": "State University",
        "degree": "BSc Computer Science",
        "gpa": 3.8,
    }
    data.update(overrides)
    return StudentSubmit(**data)


def test_submit_requires_active_event(db_session, student_user):
    with pytest.raises(NoActiveEventError):
        submit_application(db_session, student_user, _submission())
    assert db_session.query(Student).count() == 0


def test_submit_creates_application(db_session, student_user, active_event):
    student = submit_application(db_session, student_user, _submission())

    assert student.id == student_user.id
    assert student.event_id == active_event.id
    assert student.gpa == 3.8
    assert student.resume_path is None


def test_resubmit_overwrites_and_moves_to_current_event(db_session, student_user):
    first_event = create_event(db_session, "Spring 2025")
    submit_application(db_session, student_user, _submission(university="Old University"))

    second_event = create_event(db_session, "Fall 2025")
    student = submit_application(db_session, student_user, _submission(university="New University"))

    assert db_session.query(Student).count() == 1
    assert student.university == "New University"
    assert student.event_id == second_event.id
    assert student.event_id != first_event.id


def test_resubmit_in_same_event_keeps_one_row(db_session, student_user, active_event):
    submit_application(db_session, student_user, _submission(full_name="Jane Doe", gpa=3.1))
    student = submit_application(db_session, student_user, _submission(full_name="Jane A. Doe", gpa=3.9))

    assert db_session.query(Student).count() == 1
    assert student.full_name == "Jane A. Doe"
    assert student.gpa == 3.9
    assert student.event_id == active_event.id


def test_concurrent_first_submission_overwrites(db_session, student_user, active_event):
    student_id, event_id = student_user.id, active_event.id
    inserted = []

    def insert_from_other_session(session, flush_context, instances):
        if inserted or not session.new:
            return
        other = TestSessionLocal()
        try:
            other.add(Student(
                id=student_id, event_id=event_id, full_name="First Writer",
                email="first@university.edu", university="First University",
            ))
            other.commit()
        finally:
            other.close()
        inserted.append(True)

    sa_event.listen(db_session, "before_flush", insert_from_other_session)

    student = submit_application(db_session, student_user, _submission(full_name="Second Writer"))

    assert inserted
    assert student.full_name == "Second Writer"
    assert db_session.query(Student).count() == 1
    assert db_session.query(Student).one().university == "State University"


@pytest.mark.parametrize("gpa", [-0.1, 10.5])
def test_submission_gpa_out_of_range(gpa):
    with pytest.raises(ValidationError):
        _submission(gpa=gpa)


@pytest.mark.parametrize("gpa", [0, 10])
def test_submission_gpa_bounds_accepted(gpa):
    assert _submission(gpa=gpa).gpa == gpa


def test_submission_requires_university():
    with pytest.raises(ValidationError):
        _submission(university="")


def test_submit_with_uploaded_resume(db_session, student_user, active_event):
    path = store_resume(student_user)

    student = submit_application(db_session, student_user, _submission(resume_path=path))

    assert student.resume_path == path


def test_submit_rejects_resume_that_was_never_uploaded(db_session, student_user, active_event):
    path = storage_service.build_resume_path(student_user.id, "resume.pdf")

    with pytest.raises(ValueError, match="Resume upload not found"):
        submit_application(db_session, student_user, _submission(resume_path=path))


def test_submit_rejects_another_students_resume(db_session, student_user, active_event):
    other = create_user(db_session, "john.smith@university.edu")
    path = store_resume(other)

    with pytest.raises(ValueError, match="does not belong"):
        submit_application(db_session, student_user, _submission(resume_path=path))


def test_get_application_not_found(db_session, student_user):
    with pytest.raises(ApplicationNotFoundError):
        get_application(db_session, student_user)


def test_contains_pattern_escapes_wildcards():
    assert contains_pattern("a%b_c") == "%a\\%b\\_c%"
    assert contains_pattern("back\\slash") == "%back\\\\slash%"


def test_list_students_search_matches_wildcards_literally(db_session, active_event):
    create_application(
        db_session, create_user(db_session, "jane@university.edu"), active_event,
        full_name="Jane_Doe", email="jane@university.edu",
    )
    create_application(
        db_session, create_user(db_session, "janex@university.edu"), active_event,
        full_name="JaneXDoe", email="janex@university.edu",
    )

    students, total = list_students(db_session, StudentFilter(query="e_d"))
    assert total == 1 and students[0].full_name == "Jane_Doe"

    _, total = list_students(db_session, StudentFilter(query="%"))
    assert total == 0

    _, total = list_students(db_session, StudentFilter(university="%"))
    assert total == 0


def test_list_students_filters(db_session, active_event):
    jane = create_application(
        db_session, create_user(db_session, "jane.doe@university.edu"), active_event,
        gpa=3.8, resume_path="resumes/x-1.pdf",
    )
    create_application(
        db_session, create_user(db_session, "john.smith@tech.edu"), active_event,
        full_name="John Smith", email="john.smith@tech.edu", university="Tech Institute",
        degree="MSc Data Science", gpa=3.2,
    )

    students, total = list_students(db_session, StudentFilter(query="state"))
    assert total == 1 and students[0].id == jane.id

    students, total = list_students(db_session, StudentFilter(degree="data"))
    assert total == 1 and students[0].full_name == "John Smith"

    _, total = list_students(db_session, StudentFilter(gpa_min=3.2, gpa_max=3.8))
    assert total == 2

    _, total = list_students(db_session, StudentFilter(gpa_min=3.5))
    assert total == 1

    students, total = list_students(db_session, StudentFilter(has_resume=True))
    assert total == 1 and students[0].id == jane.id

    students, total = list_students(db_session, StudentFilter(has_resume=False))
    assert total == 1 and students[0].full_name == "John Smith"


def test_list_students_paginates_newest_first(db_session, active_event):
    created = []
    for i in range(3):
        user = create_user(db_session, f"student{i}@university.edu")
        student = create_application(db_session, user, active_event, full_name=f"Student {i}")
        student.created_at = student.created_at + timedelta(minutes=i)
        db_session.commit()
        created.append(student)

    students, total = list_students(db_session, StudentFilter(page=1, page_size=2))
    assert total == 3
    assert [s.full_name for s in students] == ["Student 2", "Student 1"]

    students, total = list_students(db_session, StudentFilter(page=2, page_size=2))
    assert total == 3
    assert [s.full_name for s in students] == ["Student 0"]


def test_total_pages():
    assert total_pages(0, 20) == 0
    assert total_pages(20, 20) == 1
    assert total_pages(21, 20) == 2


def test_delete_student_removes_everything(db_session, student_user, recruiter, active_event):
    path = store_resume(student_user)
    create_application(db_session, student_user, active_event, resume_path=path)
    db_session.add(Interview(
        event_id=active_event.id,
        student_id=student_user.id,
        recruiter_id=recruiter.id,
        rating_overall=4,
        rating_tech=4,
        rating_comm=4,
        feedback="Solid",
    ))
    db_session.commit()
    student_id = student_user.id
    auth_user_id = student_user.auth_user_id

    delete_student(db_session, student_id)
    db_session.expire_all()

    assert db_session.query(Student).count() == 0
    assert db_session.query(Interview).count() == 0
    assert db_session.query(AppUser).filter(AppUser.id == student_id).first() is None
    assert db_session.query(AuthUser).filter(AuthUser.id == auth_user_id).first() is None
    assert not storage_service.object_exists(path)
    # Other principals are untouched
    assert db_session.query(AppUser).filter(AppUser.role == Role.RECRUITER).count() == 1


def test_delete_unknown_student(db_session):
    with pytest.raises(StudentNotFoundError):
        delete_student(db_session, "missing-id")
