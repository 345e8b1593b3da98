"""
Dependency injection providers for FastAPI.

Long-lived services live on app.state.runtime; these factories hand them to
endpoints so tests can swap any of them through app.dependency_overrides.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from transcoder.constants import HTTPStatus
from transcoder.models import Identity, State
from transcoder.repositories import FileRepository, JobRepository
from transcoder.services.job_orchestrator import JobOrchestrator
from transcoder.services.runtime import ServiceRuntime
from transcoder.services.upload_service import UploadService


def get_runtime(request: Request) -> ServiceRuntime:
    return request.app.state.runtime


def get_identity(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Identity:
    """
    Identity of the caller, as established by the upstream auth layer.

    Raises:
        HTTPException: 401 if no user id was forwarded
    """
    if not x_user_id:
        raise HTTPException(status_code=HTTPStatus.UNAUTHORIZED, detail="Missing identity")
    return Identity(user_id=x_user_id, role=x_user_role or "user")


def get_state(runtime: ServiceRuntime = Depends(get_runtime)) -> State:
    """The last committed State; read-only."""
    return runtime.store.snapshot()


def get_file_repository(state: State = Depends(get_state)) -> FileRepository:
    return FileRepository(state)


def get_job_repository(state: State = Depends(get_state)) -> JobRepository:
    return JobRepository(state)


def get_orchestrator(runtime: ServiceRuntime = Depends(get_runtime)) -> JobOrchestrator:
    return runtime.orchestrator


def get_upload_service(runtime: ServiceRuntime = Depends(get_runtime)) -> UploadService:
    return runtime.uploads
