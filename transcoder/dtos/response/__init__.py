"""
Response DTOs

DTOs for outgoing API responses. Storage paths and owners stay internal.
"""

from .file_response import FileListResponse, FileResponse, UploadResponse
from .job_response import HealthResponse, JobListResponse, JobResponse, TranscodeResponse

__all__ = [
    "FileListResponse",
    "FileResponse",
    "UploadResponse",
    "HealthResponse",
    "JobListResponse",
    "JobResponse",
    "TranscodeResponse",
]
