"""
File Response DTOs

DTOs for file-related API responses.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from transcoder.constants import FileKind


class FileResponse(BaseModel):
    """Public view of a File record."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(description="File ID")
    kind: FileKind = Field(description="original or transcoded")
    name: str = Field(description="Display name")
    size: int = Field(description="File size in bytes; 0 until a transcode finishes")
    media_type: str = Field(description="MIME type served on download")
    created_at: datetime = Field(description="Registration timestamp")


class FileListResponse(BaseModel):
    files: List[FileResponse] = Field(description="The caller's files, newest first")


class UploadResponse(BaseModel):
    file_id: str = Field(description="Id of the registered original")
