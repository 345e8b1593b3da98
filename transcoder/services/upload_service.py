"""
Upload Service

Moves finished uploads into permanent storage and registers them as
originals.
"""
import asyncio
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional

from transcoder.constants import FileKind
from transcoder.exceptions import ApplicationError, UploadTooLargeError
from transcoder.models import File
from transcoder.repositories import FileRepository
from transcoder.services.store_writer import StoreWriter
from transcoder.utils.naming import safe_filename
from transcoder.utils.uuid_helper import generate_id

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class UploadService:
    """Service for upload intake."""

    def __init__(self, store: StoreWriter, upload_dir: Path, max_bytes: Optional[int] = None):
        self.store = store
        self.upload_dir = Path(upload_dir)
        self.max_bytes = max_bytes

    async def save_upload(
        self,
        owner: str,
        stream: BinaryIO,
        original_name: Optional[str],
        media_type: Optional[str],
    ) -> File:
        """
        Spool an incoming stream to disk, then register it.

        Raises:
            UploadTooLargeError: If the stream is larger than max_bytes
        """
        spooled = await asyncio.to_thread(self._spool, stream)
        try:
            return await self.register_upload(owner, spooled, original_name, media_type)
        finally:
            # Already moved on success
            spooled.unlink(missing_ok=True)

    async def register_upload(
        self,
        owner: str,
        source_path: Path,
        original_name: Optional[str],
        media_type: Optional[str],
    ) -> File:
        """
        Register a finalized local file as an original.

        Args:
            owner: Uploading user id
            source_path: Where the upload currently lives; it is moved
            original_name: Client-supplied file name
            media_type: Client-supplied MIME type

        Returns:
            The registered File
        """
        file_id = generate_id()
        name = safe_filename(original_name)
        destination = self.upload_dir / f"{file_id}_{name}"

        size = await asyncio.to_thread(self._move_into_storage, Path(source_path), destination)
        record = File(
            id=file_id,
            owner=owner,
            kind=FileKind.ORIGINAL,
            name=name,
            path=str(destination),
            size=size,
            media_type=media_type or "application/octet-stream",
        )

        try:
            await self.store.commit(lambda state: FileRepository(state).register(record))
        except ApplicationError:
            destination.unlink(missing_ok=True)
            raise

        logger.info(f"📤 Registered upload {file_id} ({name}, {size} bytes) for {owner}")
        return record

    def _spool(self, stream: BinaryIO) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(self.upload_dir), prefix=".upload-", suffix=".part")
        tmp_path = Path(tmp_name)
        written = 0
        try:
            with os.fdopen(fd, "wb") as handle:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if self.max_bytes is not None and written > self.max_bytes:
                        raise UploadTooLargeError(self.max_bytes)
                    handle.write(chunk)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        return tmp_path

    @staticmethod
    def _move_into_storage(source: Path, destination: Path) -> int:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(destination))
        return destination.stat().st_size
