"""
Job Response DTOs

DTOs for job-related API responses.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from transcoder.constants import JobStatus


class JobResponse(BaseModel):
    """Public view of a Job record."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(description="Job ID")
    owner: str = Field(description="Requesting user")
    input_id: str = Field(description="Original being transcoded")
    output_id: str = Field(description="Placeholder output file")
    status: JobStatus = Field(description="queued, running, done or error")
    created_at: datetime
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    error: Optional[str] = Field(None, description="Failure reason when status is error")


class JobListResponse(BaseModel):
    jobs: List[JobResponse] = Field(description="The caller's jobs, newest first")


class TranscodeResponse(BaseModel):
    job_id: str
    output_file_id: str


class HealthResponse(BaseModel):
    ok: bool = True
