"""
Integration tests for application intake, résumé upload and signed storage URLs.
"""
from urllib.parse import urlparse, parse_qs

import pytest

from app.core import config
from app.services import storage_service
from app.services.storage_service import create_signed_url, build_resume_path
from conftest import create_user, auth_headers, store_resume


def _application(**overrides):
    data = {
        "full_name": "Jane Doe",
        "email": "jane.doe@university.edu",
        "university": "State University",
        "degree": "BSc Computer Science",
        "gpa": 3.8,
    }
    data.update(overrides)
    return data


def _token(url: str) -> str:
    return parse_qs(urlparse(url).query)["token"][0]


def test_get_application_before_applying(client, student_user):
    response = client.get("/api/student", headers=auth_headers(student_user))

    assert response.status_code == 404
    assert response.json()["detail"] == "No application found"


def test_submit_without_active_event(client, student_user):
    response = client.post("/api/student", json=_application(), headers=auth_headers(student_user))

    assert response.status_code == 400
    assert response.json()["detail"] == "No active recruiting event found"


def test_submit_validation_error(client, student_user, active_event):
    response = client.post(
        "/api/student", json=_application(email="not-an-email"), headers=auth_headers(student_user)
    )

    assert response.status_code == 400
    assert response.json()["detail"].startswith("email:")


@pytest.mark.parametrize("gpa", [-0.1, 10.5])
def test_submit_rejects_gpa_out_of_range(client, student_user, active_event, gpa):
    response = client.post("/api/student", json=_application(gpa=gpa), headers=auth_headers(student_user))

    assert response.status_code == 400
    assert response.json()["detail"].startswith("gpa:")


@pytest.mark.parametrize("gpa", [0, 10])
def test_submit_accepts_gpa_bounds(client, student_user, active_event, gpa):
    response = client.post("/api/student", json=_application(gpa=gpa), headers=auth_headers(student_user))

    assert response.status_code == 200
    assert response.json()["gpa"] == gpa


def test_submit_rejects_empty_university(client, student_user, active_event):
    response = client.post(
        "/api/student", json=_application(university=""), headers=auth_headers(student_user)
    )

    assert response.status_code == 400
    assert response.json()["detail"].startswith("university:")


def test_resubmit_in_same_event_overwrites(client, student_user, active_event):
    headers = auth_headers(student_user)

    client.post("/api/student", json=_application(degree="BSc Physics"), headers=headers)
    second = client.post("/api/student", json=_application(degree="MSc Physics"), headers=headers)

    assert second.status_code == 200
    fetched = client.get("/api/student", headers=headers).json()
    assert fetched["degree"] == "MSc Physics"
    assert fetched["event_id"] == active_event.id


def test_submit_and_fetch_application(client, student_user, active_event):
    headers = auth_headers(student_user)

    submitted = client.post("/api/student", json=_application(), headers=headers)
    assert submitted.status_code == 200

    fetched = client.get("/api/student", headers=headers)
    assert fetched.status_code == 200
    assert fetched.json()["full_name"] == "Jane Doe"
    assert fetched.json()["event_id"] == active_event.id


def test_application_routes_are_student_only(client, recruiter, admin):
    for user in (recruiter, admin):
        response = client.get("/api/student", headers=auth_headers(user))
        assert response.status_code == 403
        assert response.json()["detail"] == "Only students can access applications"


def test_resume_upload_flow(client, student_user, active_event):
    headers = auth_headers(student_user)

    upload = client.post("/api/upload", json={"name": "CV.PDF", "type": "application/pdf"}, headers=headers)
    assert upload.status_code == 200
    credential = upload.json()
    assert credential["path"].startswith(f"resumes/{student_user.id}-")
    assert credential["path"].endswith(".pdf")
    assert credential["signedUrl"].startswith("http://localhost:8000/storage/upload?token=")

    stored = client.put("/storage/upload", params={"token": credential["token"]}, content=b"%PDF-1.4 jane")
    assert stored.status_code == 200
    assert stored.json() == {"path": credential["path"], "size": 13}

    submitted = client.post("/api/student", json=_application(resume_path=credential["path"]), headers=headers)
    assert submitted.status_code == 200
    assert submitted.json()["resume_path"] == credential["path"]

    download = client.get("/api/upload", params={"path": credential["path"]}, headers=headers)
    assert download.status_code == 200
    fetched = client.get("/storage/object", params={"token": _token(download.json()["signedUrl"])})
    assert fetched.status_code == 200
    assert fetched.content == b"%PDF-1.4 jane"


def test_upload_requires_extension(client, student_user):
    response = client.post(
        "/api/upload", json={"name": "resume", "type": "application/pdf"}, headers=auth_headers(student_user)
    )

    assert response.status_code == 400


def test_students_cannot_download_other_resumes(client, student_user, db_session):
    other = create_user(db_session, "john.smith@university.edu")
    path = store_resume(other)

    response = client.get("/api/upload", params={"path": path}, headers=auth_headers(student_user))

    assert response.status_code == 403


def test_recruiter_can_download_any_resume(client, recruiter, student_user):
    path = store_resume(student_user)

    response = client.get("/api/upload", params={"path": path}, headers=auth_headers(recruiter))

    assert response.status_code == 200


def test_upload_token_cannot_download(client, student_user):
    upload = client.post(
        "/api/upload", json={"name": "resume.pdf", "type": "application/pdf"}, headers=auth_headers(student_user)
    ).json()

    response = client.get("/storage/object", params={"token": upload["token"]})

    assert response.status_code == 400


def test_upload_rejects_oversized_file(client, student_user, monkeypatch):
    monkeypatch.setattr(config, "MAX_UPLOAD_BYTES", 4)
    upload = client.post(
        "/api/upload", json={"name": "resume.pdf", "type": "application/pdf"}, headers=auth_headers(student_user)
    ).json()

    response = client.put("/storage/upload", params={"token": upload["token"]}, content=b"too large")

    assert response.status_code == 400
    assert "maximum size" in response.json()["detail"]
    assert not storage_service.object_exists(upload["path"])


def test_streamed_upload_stops_at_size_limit(client, student_user, monkeypatch):
    monkeypatch.setattr(config, "MAX_UPLOAD_BYTES", 4)
    upload = client.post(
        "/api/upload", json={"name": "resume.pdf", "type": "application/pdf"}, headers=auth_headers(student_user)
    ).json()

    # No Content-Length: the body arrives chunked
    chunks = iter([b"%P", b"DF", b"-1.4"])
    response = client.put("/storage/upload", params={"token": upload["token"]}, content=chunks)

    assert response.status_code == 400
    assert "maximum size" in response.json()["detail"]
    assert not storage_service.object_exists(upload["path"])


def test_streamed_upload_within_limit(client, student_user):
    upload = client.post(
        "/api/upload", json={"name": "resume.pdf", "type": "application/pdf"}, headers=auth_headers(student_user)
    ).json()

    chunks = iter([b"%PDF", b"-1.4 ", b"resume"])
    response = client.put("/storage/upload", params={"token": upload["token"]}, content=chunks)

    assert response.status_code == 200
    assert response.json()["size"] == len(b"%PDF-1.4 resume")


def test_check_upload_size(monkeypatch):
    monkeypatch.setattr(config, "MAX_UPLOAD_BYTES", 4)

    storage_service.check_upload_size(4)
    with pytest.raises(ValueError, match="maximum size of 4 bytes"):
        storage_service.check_upload_size(5)


def test_download_missing_object(client, student_user):
    url = create_signed_url(build_resume_path(student_user.id, "resume.pdf"))

    response = client.get("/storage/object", params={"token": _token(url)})

    assert response.status_code == 404


def test_health(client, monkeypatch):
    from app.api.routes import health
    from conftest import TestSessionLocal

    monkeypatch.setattr(health, "SessionLocal", TestSessionLocal)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
