"""
Jobs API endpoints
"""
import logging

from fastapi import APIRouter, Depends

from transcoder.constants import HTTPStatus
from transcoder.dependencies import get_identity, get_job_repository, get_orchestrator
from transcoder.dtos.response import JobListResponse, JobResponse, TranscodeResponse
from transcoder.exceptions import NotFoundError
from transcoder.models import Identity
from transcoder.repositories import JobRepository
from transcoder.services.job_orchestrator import JobOrchestrator
from transcoder.utils.error_handlers import handle_api_errors

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/transcode/{file_id}", status_code=HTTPStatus.ACCEPTED, response_model=TranscodeResponse)
@handle_api_errors("Transcode request")
async def request_transcode(
    file_id: str,
    identity: Identity = Depends(get_identity),
    orchestrator: JobOrchestrator = Depends(get_orchestrator),
):
    """
    Queue a transcode of one of the caller's originals.

    Returns as soon as the job is recorded; poll GET /jobs/{job_id} for progress.
    """
    ticket = await orchestrator.request_transcode(file_id, identity.user_id)
    return TranscodeResponse(job_id=ticket.job_id, output_file_id=ticket.output_file_id)


@router.get("/jobs", response_model=JobListResponse)
@handle_api_errors("List jobs")
async def list_jobs(
    identity: Identity = Depends(get_identity),
    jobs: JobRepository = Depends(get_job_repository),
):
    return JobListResponse(
        jobs=[JobResponse.model_validate(j) for j in jobs.list_by_owner(identity.user_id)]
    )


@router.get("/jobs/{job_id}", response_model=JobResponse)
@handle_api_errors("Get job")
async def get_job(
    job_id: str,
    identity: Identity = Depends(get_identity),
    jobs: JobRepository = Depends(get_job_repository),
):
    job = jobs.find_by_id(job_id, identity.user_id)
    if job is None:
        raise NotFoundError("job", job_id, "Job not found")
    return JobResponse.model_validate(job)
