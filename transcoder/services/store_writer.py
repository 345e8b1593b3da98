"""
StoreWriter: the single owner of the committed State.

Every mutation is submitted as a command (a callable taking a State) and
applied by one asyncio task, one at a time. The command runs against a deep
copy; the copy is saved to disk and only then becomes the committed State.
If the command raises or the save fails, the committed State is untouched
and the exception is delivered to the submitter.

Readers call snapshot() and must treat the result as read-only.
"""
import asyncio
import logging
from typing import Callable, Optional, Tuple, TypeVar

from transcoder.database import DocumentStore
from transcoder.models import State

logger = logging.getLogger(__name__)

T = TypeVar("T")
Command = Callable[[State], T]


class StoreWriter:
    """Serializes all State mutations through a command queue."""

    def __init__(self, store: DocumentStore):
        self.store = store
        self._state: Optional[State] = None
        self._queue: Optional["asyncio.Queue[Tuple[Command, asyncio.Future]]"] = None
        self._task: Optional[asyncio.Task] = None
        self.running = False

    async def start(self):
        """Load the persisted State and start applying commands."""
        if self.running:
            logger.warning("StoreWriter already running")
            return

        self._state = await asyncio.to_thread(self.store.load)
        self._queue = asyncio.Queue()
        self.running = True
        self._task = asyncio.create_task(self._writer_loop())
        logger.info(f"StoreWriter started ({self.store.path})")

    async def stop(self):
        """Apply whatever is already queued, then stop."""
        if not self.running:
            return

        self.running = False
        await self._queue.join()
        self._task.cancel()
        results = await asyncio.gather(self._task, return_exceptions=True)
        if results and isinstance(results[0], Exception):
            logger.error(f"StoreWriter loop failed: {results[0]}")
        self._task = None
        logger.info("StoreWriter stopped")

    def snapshot(self) -> State:
        """The last committed State."""
        if self._state is None:
            raise RuntimeError("StoreWriter has not been started")
        return self._state

    async def commit(self, command: Command) -> T:
        """
        Apply `command` to a copy of the State and persist the result.

        Returns:
            Whatever the command returned, once the new State is on disk

        Raises:
            Whatever the command raised, or PersistenceError if the save failed
        """
        if not self.running:
            raise RuntimeError("StoreWriter is not running")

        future = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((command, future))
        return await future

    async def _writer_loop(self):
        logger.info("Store writer loop started")
        while True:
            command, future = await self._queue.get()
            try:
                await self._apply(command, future)
            finally:
                self._queue.task_done()

    async def _apply(self, command: Command, future: asyncio.Future):
        working = self._state.model_copy(deep=True)
        try:
            result = command(working)
            await asyncio.to_thread(self.store.save, working)
        except Exception as e:
            if not future.cancelled():
                future.set_exception(e)
            else:
                logger.error(f"Store command failed after its caller went away: {e}")
            return

        self._state = working
        if not future.cancelled():
            future.set_result(result)
