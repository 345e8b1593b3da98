"""
Wires the store, the worker pool and the services together for one process.
"""
import logging

from transcoder.config import Settings
from transcoder.database import DocumentStore
from transcoder.services.job_integrity_service import JobIntegrityService
from transcoder.services.job_orchestrator import JobOrchestrator
from transcoder.services.process_supervisor import ProcessSupervisor
from transcoder.services.store_writer import StoreWriter
from transcoder.services.upload_service import UploadService
from transcoder.services.worker_pool import WorkerPool
from transcoder.workers.encoder_runner import EncoderRunner

logger = logging.getLogger(__name__)


class ServiceRuntime:
    """Owns every long-lived component and their start/stop order"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.store = StoreWriter(DocumentStore(settings.DOCUMENT_PATH))
        self.runner = EncoderRunner.from_settings(settings)
        self.supervisor = ProcessSupervisor(self.store, self.runner)
        self.pool = WorkerPool(self.supervisor, settings.MAX_WORKERS)
        self.orchestrator = JobOrchestrator(self.store, self.pool, settings.OUTPUT_DIR)
        self.uploads = UploadService(self.store, settings.UPLOAD_DIR, settings.MAX_UPLOAD_BYTES)
        self.integrity = JobIntegrityService(self.store, self.pool)

    async def start(self):
        self.settings.ensure_dirs()
        await self.store.start()
        await self.pool.start()
        await self.integrity.recover()
        logger.info(f"🎬 Encoder: {self.runner.binary} ({self.pool.max_workers} workers)")

    async def stop(self):
        await self.pool.stop()
        await self.store.stop()
