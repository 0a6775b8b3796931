"""
Tests for résumé object paths and signed storage URLs.
"""
from datetime import datetime, timezone

import pytest

from app.core.security import STORAGE_UPLOAD_PURPOSE, STORAGE_DOWNLOAD_PURPOSE
from app.services import storage_service
from app.services.storage_service import InvalidSignedUrlError


def test_build_resume_path():
    now = datetime(2025, 8, 18, 9, 32, 44, tzinfo=timezone.utc)

    path = storage_service.build_resume_path("user-1", "My CV.Docx", now=now)

    assert path == f"resumes/user-1-{int(now.timestamp() * 1000)}.docx"


@pytest.mark.parametrize("filename", ["", "resume", "resume.p/df", "resume."])
def test_build_resume_path_rejects_bad_names(filename):
    with pytest.raises(ValueError):
        storage_service.build_resume_path("user-1", filename)


@pytest.mark.parametrize("path", ["", "   ", "/etc/passwd", "resumes/../secrets"])
def test_normalize_rejects_unsafe_paths(path):
    with pytest.raises(ValueError):
        storage_service.normalize_object_path(path)


def test_is_owned_resume_path():
    assert storage_service.is_owned_resume_path("user-1", "resumes/user-1-1755507164000.pdf")
    assert not storage_service.is_owned_resume_path("user-1", "resumes/user-2-1755507164000.pdf")
    assert not storage_service.is_owned_resume_path("user-1", "other/user-1-1755507164000.pdf")


def test_signed_tokens_are_bound_to_operation():
    upload = storage_service.create_signed_upload_url("resumes/user-1-1.pdf")

    assert storage_service.resolve_signed_token(upload["token"], STORAGE_UPLOAD_PURPOSE) == "resumes/user-1-1.pdf"
    with pytest.raises(InvalidSignedUrlError):
        storage_service.resolve_signed_token(upload["token"], STORAGE_DOWNLOAD_PURPOSE)


def test_write_read_delete_object():
    path = "resumes/user-1-1.pdf"

    assert storage_service.write_object(path, b"data") == 4
    assert storage_service.object_exists(path)
    assert storage_service.get_object_file(path).read_bytes() == b"data"

    assert storage_service.delete_object(path) is True
    assert storage_service.delete_object(path) is False
    with pytest.raises(FileNotFoundError):
        storage_service.get_object_file(path)
