"""
Job repository: the ledger of transcode requests and their state machine.
"""

from typing import List, Optional

from transcoder.constants import JOB_TRANSITIONS, JobStatus
from transcoder.exceptions import InvalidTransitionError
from transcoder.models import Job, State, utc_now
from .base_repository import BaseRepository


class JobRepository(BaseRepository[Job]):
    """Repository for Job records."""

    entity_name = "job"

    def __init__(self, state: State):
        super().__init__(state.jobs)

    def find_by_id(self, job_id: str, owner: str) -> Optional[Job]:
        """Owner-scoped lookup; None for both missing and foreign jobs."""
        return self.get_owned(job_id, owner)

    def list_by_status(self, status: JobStatus) -> List[Job]:
        return self.filter_by(status=status)

    def transition(self, job_id: str, next_status: JobStatus, error: Optional[str] = None) -> Optional[Job]:
        """
        Move a job to its next status and stamp the matching fields.

        queued -> running sets started_at; running -> done sets finished_at;
        running -> error sets finished_at and error.

        Args:
            job_id: Job id
            next_status: Requested status
            error: Human-readable reason, required when next_status is ERROR

        Returns:
            The updated job, or None if the job no longer exists

        Raises:
            InvalidTransitionError: If the transition is not part of the state machine
        """
        job = self.get_by_id(job_id)
        if job is None:
            return None

        if next_status not in JOB_TRANSITIONS[job.status]:
            raise InvalidTransitionError(job_id, job.status.value, next_status.value)

        now = utc_now()
        if next_status == JobStatus.RUNNING:
            job.started_at = now
        else:
            job.finished_at = now
            if next_status == JobStatus.ERROR:
                job.error = error or "unknown error"

        job.status = next_status
        return job
