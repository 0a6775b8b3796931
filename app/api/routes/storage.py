"""
Object storage endpoints behind the signed URLs handed out by the API.

Neither route takes a session; the token in the query string is the credential.
"""
import logging
from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.responses import FileResponse

from app.core.errors import http_error_from
from app.core.security import STORAGE_UPLOAD_PURPOSE, STORAGE_DOWNLOAD_PURPOSE
from app.services import storage_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/storage", tags=["Storage"])


async def read_limited_body(request: Request) -> bytes:
    """
    Request body, refused as soon as it is known to exceed MAX_UPLOAD_BYTES:
    up front from Content-Length, otherwise while streaming.
    """
    declared = request.headers.get("content-length")
    if declared and declared.isdigit():
        storage_service.check_upload_size(int(declared))

    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        storage_service.check_upload_size(received)
        chunks.append(chunk)
    return b"".join(chunks)


@router.put("/upload")
async def upload_object(request: Request, token: str = Query(...)):
    try:
        path = storage_service.resolve_signed_token(token, STORAGE_UPLOAD_PURPOSE)
        data = await read_limited_body(request)
        if not data:
            raise ValueError("File is empty")
        size = storage_service.write_object(path, data)
    except Exception as e:
        raise http_error_from(e, "store object")

    return {"path": path, "size": size}


@router.get("/object")
def download_object(token: str = Query(...)):
    try:
        path = storage_service.resolve_signed_token(token, STORAGE_DOWNLOAD_PURPOSE)
        target = storage_service.get_object_file(path)
    except FileNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Object not found")
    except Exception as e:
        raise http_error_from(e, "read object")

    return FileResponse(target, filename=target.name)
