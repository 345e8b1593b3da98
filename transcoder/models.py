"""
Persisted records.

Every record lives in a single State document that the store rewrites in
full on each commit. Components outside the store only ever hold copies.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from transcoder.constants import FileKind, JobStatus


def utc_now():
    return datetime.now(timezone.utc)


class File(BaseModel):
    """
    An uploaded original or a transcoded output.

    For transcoded files the record is created as a placeholder (size 0)
    when the job is submitted; size is filled in once the job is done.
    """

    id: str
    owner: str
    kind: FileKind
    name: str
    path: str
    size: int = 0
    media_type: str = "application/octet-stream"
    created_at: datetime = Field(default_factory=utc_now)


class Job(BaseModel):
    """A request to transcode one original into one placeholder output."""

    id: str
    owner: str
    input_id: str
    output_id: str
    status: JobStatus = JobStatus.QUEUED
    created_at: datetime = Field(default_factory=utc_now)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


class State(BaseModel):
    """The whole persisted document: {files: [...], jobs: [...]}"""

    files: List[File] = Field(default_factory=list)
    jobs: List[Job] = Field(default_factory=list)


@dataclass(frozen=True)
class Identity:
    """Verified caller identity supplied by the upstream auth layer."""

    user_id: str
    role: str = "user"
