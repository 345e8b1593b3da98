"""
Process Supervisor

Drives one job from queued to a terminal status: marks it running, runs the
encoder, and records the outcome. Nothing here raises to the requester; a
failed encode is written onto the job record instead.
"""
from typing import Optional

from transcoder.constants import ErrorMessages, JobStatus
from transcoder.dtos.internal import DispatchRequest
from transcoder.models import Job, State
from transcoder.repositories import FileRepository, JobRepository
from transcoder.services.store_writer import StoreWriter
from transcoder.utils.file_utils import file_size, remove_partial_output
from transcoder.utils.logging_utils import StructuredLogger, clear_logging_context, set_logging_context
from transcoder.workers.encoder_runner import EncoderRunner

logger = StructuredLogger(__name__)


class ProcessSupervisor:
    """Runs a dispatched job and commits each of its status changes."""

    def __init__(self, store: StoreWriter, runner: EncoderRunner):
        self.store = store
        self.runner = runner

    async def run(self, request: DispatchRequest) -> Optional[Job]:
        """
        Execute one job.

        Returns:
            The job in its terminal state, or None if the job vanished or
            was not in a state that can be started
        """
        job = JobRepository(self.store.snapshot()).get_by_id(request.job_id)
        if job is None:
            logger.warning(f"Job {request.job_id} not found, skipping")
            return None

        set_logging_context(job_id=job.id, owner=job.owner)
        try:
            return await self._execute(job, request)
        finally:
            clear_logging_context()

    async def _execute(self, job: Job, request: DispatchRequest) -> Optional[Job]:
        started = await self.store.commit(lambda state: self._start(state, job.id))
        if started is None:
            logger.warning("Job vanished or was already started, skipping")
            return None
        logger.info(f"▶️  Job running: {request.input_path} -> {request.output_path}")

        try:
            result = await self.runner.run(request.input_path, request.output_path)
        except OSError as e:
            logger.error(f"Encoder launch failed: {e}")
            return await self._fail(job.id, ErrorMessages.LAUNCH_FAILED.format(reason=e))

        if result.timed_out:
            remove_partial_output(request.output_path)
            return await self._fail(
                job.id, ErrorMessages.TIMED_OUT.format(seconds=_format_seconds(self.runner.timeout))
            )

        if result.returncode != 0:
            remove_partial_output(request.output_path)
            if result.stderr_tail:
                logger.warning("Encoder stderr (tail):\n" + "\n".join(result.stderr_tail))
            return await self._fail(job.id, ErrorMessages.EXIT_CODE.format(code=result.returncode))

        size = file_size(request.output_path)
        done = await self.store.commit(
            lambda state: self._complete(state, job.id, job.output_id, size)
        )
        logger.info(f"✅ Job done ({size if size is not None else 'unknown'} bytes)")
        return done

    @staticmethod
    def _start(state: State, job_id: str) -> Optional[Job]:
        jobs = JobRepository(state)
        job = jobs.get_by_id(job_id)
        if job is None or job.status != JobStatus.QUEUED:
            return None
        return jobs.transition(job_id, JobStatus.RUNNING)

    @staticmethod
    def _complete(state: State, job_id: str, output_id: str, size: Optional[int]) -> Optional[Job]:
        finished = JobRepository(state).transition(job_id, JobStatus.DONE)
        if finished is not None and size is not None:
            FileRepository(state).update_size(output_id, size)
        return finished

    async def _fail(self, job_id: str, reason: str) -> Optional[Job]:
        failed = await self.store.commit(
            lambda state: JobRepository(state).transition(job_id, JobStatus.ERROR, error=reason)
        )
        logger.error(f"❌ Job failed: {reason}")
        return failed


def _format_seconds(seconds: Optional[float]) -> str:
    if seconds is None:
        return "?"
    return str(int(seconds)) if float(seconds).is_integer() else str(seconds)
