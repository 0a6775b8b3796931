"""
Résumé upload and download credentials.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.auth_dependency import get_current_user, require_student
from app.core.errors import http_error_from
from app.db.models.app_user import AppUser, Role
from app.schemas.student import UploadRequest, UploadResponse, SignedUrlResponse
from app.services import storage_service
from app.services.student_service import create_resume_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["Upload"])


@router.post("", response_model=UploadResponse)
def create_upload(
    payload: UploadRequest,
    user: AppUser = Depends(require_student)
):
    """
    Issue a signed upload URL for a new résumé.

    The client PUTs the file to ``signedUrl`` and then submits ``path`` as the
    application's ``resume_path``.
    """
    try:
        upload = create_resume_upload(user, payload.name)
    except Exception as e:
        raise http_error_from(e, "create upload URL")

    logger.info(f"Upload URL issued: user_id={user.id}, path={upload['path']}, type={payload.type}")
    return UploadResponse(**upload)


@router.get("", response_model=SignedUrlResponse)
def get_download_url(
    path: Optional[str] = Query(None, description="Résumé storage path"),
    user: AppUser = Depends(get_current_user)
):
    """Short-lived download URL. Students may only fetch their own résumé."""
    if not path:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Path is required")

    try:
        if user.role == Role.STUDENT and not storage_service.is_owned_resume_path(user.id, path):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        url = storage_service.create_signed_url(path)
    except Exception as e:
        raise http_error_from(e, "create download URL")

    return SignedUrlResponse(signed_url=url)
