"""
Job Integrity Service - settles jobs left behind by a previous process

Called once at startup, after the store is loaded and before the HTTP
surface accepts requests:
1. RUNNING jobs lost their encoder when the old process died. They are
   marked as failed and their partial output is removed.
2. QUEUED jobs never started. They are handed to the worker pool again.
"""
import logging
from dataclasses import dataclass

from transcoder.constants import ErrorMessages, JobStatus
from transcoder.dtos.internal import DispatchRequest
from transcoder.repositories import FileRepository, JobRepository
from transcoder.services.store_writer import StoreWriter
from transcoder.services.worker_pool import WorkerPool
from transcoder.utils.file_utils import remove_partial_output

logger = logging.getLogger(__name__)


@dataclass
class RecoveryReport:
    interrupted: int = 0
    requeued: int = 0
    skipped: int = 0


class JobIntegrityService:
    """Service for startup job recovery"""

    def __init__(self, store: StoreWriter, pool: WorkerPool):
        self.store = store
        self.pool = pool

    async def recover(self) -> RecoveryReport:
        report = RecoveryReport()
        state = self.store.snapshot()
        files = FileRepository(state)
        jobs = JobRepository(state)

        for job in jobs.list_by_status(JobStatus.RUNNING):
            output = files.get_by_id(job.output_id)
            if output is not None:
                remove_partial_output(output.path)
            await self.store.commit(
                lambda s, job_id=job.id: JobRepository(s).transition(
                    job_id, JobStatus.ERROR, error=ErrorMessages.INTERRUPTED
                )
            )
            report.interrupted += 1

        for job in jobs.list_by_status(JobStatus.QUEUED):
            source = files.get_by_id(job.input_id)
            output = files.get_by_id(job.output_id)
            if source is None or output is None:
                logger.warning(f"⚠️  Queued job {job.id} references a missing file record, leaving it")
                report.skipped += 1
                continue
            self.pool.submit(DispatchRequest(job_id=job.id, input_path=source.path, output_path=output.path))
            report.requeued += 1

        if report.interrupted or report.requeued or report.skipped:
            logger.warning(
                f"🔧 Startup recovery: {report.interrupted} interrupted, "
                f"{report.requeued} requeued, {report.skipped} skipped"
            )
        else:
            logger.info("✅ No unfinished jobs found - queue is clean")
        return report
