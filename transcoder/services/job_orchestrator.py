"""
Job Orchestrator

Accepts transcode requests. A request is acknowledged as soon as the job and
its placeholder output are durably recorded; the encode itself happens later
on the worker pool.
"""
import asyncio
import logging
from pathlib import Path
from typing import Callable

from transcoder.constants import FileKind, OutputNaming
from transcoder.dtos.internal import DispatchRequest, TranscodeTicket
from transcoder.exceptions import InputNotFoundError
from transcoder.models import File, Job, State
from transcoder.repositories import FileRepository, JobRepository
from transcoder.services.store_writer import StoreWriter
from transcoder.services.worker_pool import WorkerPool
from transcoder.utils.naming import transcoded_name
from transcoder.utils.uuid_helper import generate_id

logger = logging.getLogger(__name__)


class JobOrchestrator:
    """Creates transcode jobs and hands them to the worker pool."""

    def __init__(self, store: StoreWriter, pool: WorkerPool, output_dir: Path):
        self.store = store
        self.pool = pool
        self.output_dir = Path(output_dir)

    async def request_transcode(
        self,
        input_id: str,
        owner: str,
        output_name_fn: Callable[[str], str] = transcoded_name,
    ) -> TranscodeTicket:
        """
        Register a transcode of one of `owner`'s originals.

        Resolving the input and inserting both records happen in a single
        store command, so a concurrent request can never observe a job
        without its output placeholder.

        Args:
            input_id: Id of the original to transcode
            owner: Requesting user id
            output_name_fn: Maps the original's name to the output's name

        Returns:
            TranscodeTicket with the new job id and output file id

        Raises:
            InputNotFoundError: If the input is missing, foreign or not an original
            PersistenceError: If the new records could not be saved
        """
        output_id = generate_id()
        job_id = generate_id()

        def register(state: State) -> DispatchRequest:
            files = FileRepository(state)
            source = files.find_by_id(input_id, owner)
            if source is None or source.kind != FileKind.ORIGINAL:
                raise InputNotFoundError(input_id)

            output_name = output_name_fn(source.name)
            output = files.register(File(
                id=output_id,
                owner=owner,
                kind=FileKind.TRANSCODED,
                name=output_name,
                path=str(self.output_dir / f"{output_id}_{output_name}"),
                size=0,
                media_type=OutputNaming.MEDIA_TYPE,
            ))
            JobRepository(state).create(Job(
                id=job_id,
                owner=owner,
                input_id=source.id,
                output_id=output.id,
            ))
            return DispatchRequest(job_id=job_id, input_path=source.path, output_path=output.path)

        # Commit and dispatch complete even if the caller is cancelled
        await asyncio.shield(self._register_and_dispatch(register))

        logger.info(f"📥 Queued job {job_id} for {owner}: {input_id} -> {output_id}")
        return TranscodeTicket(job_id=job_id, output_file_id=output_id)

    async def _register_and_dispatch(self, register: Callable[[State], DispatchRequest]):
        dispatch = await self.store.commit(register)
        self.pool.submit(dispatch)
