import asyncio
import logging
from typing import List, Optional

from transcoder.dtos.internal import DispatchRequest
from transcoder.services.process_supervisor import ProcessSupervisor

logger = logging.getLogger(__name__)


class WorkerPool:
    """Fixed number of worker tasks pulling dispatched jobs from a queue"""

    def __init__(self, supervisor: ProcessSupervisor, max_workers: int):
        self.supervisor = supervisor
        self.max_workers = max(1, max_workers)
        self._queue: Optional["asyncio.Queue[DispatchRequest]"] = None
        self._tasks: List[asyncio.Task] = []
        self.running = False

    def submit(self, request: DispatchRequest):
        """Enqueue a job without waiting for it to run"""
        if self._queue is None:
            raise RuntimeError("WorkerPool has not been started")
        self._queue.put_nowait(request)
        logger.debug(f"Job {request.job_id} queued ({self._queue.qsize()} waiting)")

    async def join(self):
        """Wait until every submitted job has been processed"""
        await self._queue.join()

    async def _worker_loop(self, index: int):
        logger.info(f"Encode worker {index} started")
        while True:
            request = await self._queue.get()
            try:
                await self.supervisor.run(request)
            except Exception as e:
                # A broken job must not take the worker down with it
                logger.error(f"Encode worker {index} failed on job {request.job_id}: {e}", exc_info=True)
            finally:
                self._queue.task_done()

    async def start(self):
        """Start the worker tasks"""
        if self.running:
            logger.warning("WorkerPool already running")
            return

        logger.info(f"Starting WorkerPool with {self.max_workers} workers...")
        self._queue = asyncio.Queue()
        self.running = True
        self._tasks = [
            asyncio.create_task(self._worker_loop(i)) for i in range(self.max_workers)
        ]
        logger.info("WorkerPool started - all workers running")

    async def stop(self):
        """Cancel all worker tasks and wait for them to finish"""
        if not self.running:
            return

        logger.info("Stopping WorkerPool...")
        self.running = False

        for task in self._tasks:
            if not task.done():
                task.cancel()

        results = await asyncio.gather(*self._tasks, return_exceptions=True)
        for i, result in enumerate(results):
            if isinstance(result, asyncio.CancelledError):
                logger.debug(f"Encode worker {i} cancelled")
            elif isinstance(result, Exception):
                logger.error(f"Encode worker {i} failed: {result}")

        pending = self._queue.qsize()
        if pending:
            logger.info(f"🛑 {pending} queued jobs left for the next start")
        self._tasks = []
        logger.info("WorkerPool stopped")
