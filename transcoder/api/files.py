"""
Files API endpoints: upload, listing and download
"""
import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File as FileParam, HTTPException, UploadFile
from fastapi.responses import FileResponse as FileDownload

from transcoder.constants import HTTPStatus
from transcoder.dependencies import get_file_repository, get_identity, get_upload_service
from transcoder.dtos.response import FileListResponse, FileResponse, UploadResponse
from transcoder.exceptions import NotFoundError, ValidationError
from transcoder.models import Identity
from transcoder.repositories import FileRepository
from transcoder.services.upload_service import UploadService
from transcoder.utils.error_handlers import handle_api_errors

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload", status_code=HTTPStatus.CREATED, response_model=UploadResponse)
@handle_api_errors("Upload")
async def upload_file(
    file: Optional[UploadFile] = FileParam(None),
    identity: Identity = Depends(get_identity),
    uploads: UploadService = Depends(get_upload_service),
):
    """Store an uploaded video as a new original."""
    if file is None:
        raise ValidationError("No file", {"file": "required"})

    try:
        record = await uploads.save_upload(
            owner=identity.user_id,
            stream=file.file,
            original_name=file.filename,
            media_type=file.content_type,
        )
    finally:
        await file.close()
    return UploadResponse(file_id=record.id)


@router.get("/files", response_model=FileListResponse)
@handle_api_errors("List files")
async def list_files(
    identity: Identity = Depends(get_identity),
    files: FileRepository = Depends(get_file_repository),
):
    """The caller's originals and outputs, newest first."""
    return FileListResponse(
        files=[FileResponse.model_validate(f) for f in files.list_by_owner(identity.user_id)]
    )


@router.get("/download/{file_id}")
@handle_api_errors("Download")
async def download_file(
    file_id: str,
    identity: Identity = Depends(get_identity),
    files: FileRepository = Depends(get_file_repository),
):
    record = files.find_by_id(file_id, identity.user_id)
    if record is None:
        raise NotFoundError("file", file_id, "File not found")

    path = Path(record.path)
    if not path.is_file():
        logger.warning(f"File {file_id} is registered but missing on disk: {path}")
        raise HTTPException(status_code=HTTPStatus.GONE, detail="File no longer exists on server")

    return FileDownload(path, media_type=record.media_type, filename=record.name)
