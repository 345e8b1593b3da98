import io
from pathlib import Path

import pytest

from transcoder.constants import FileKind
from transcoder.exceptions import UploadTooLargeError
from transcoder.repositories import FileRepository
from transcoder.services.upload_service import UploadService


@pytest.fixture
def uploads(store, settings):
    return UploadService(store, settings.UPLOAD_DIR, max_bytes=1024)


@pytest.mark.asyncio
async def test_register_upload_moves_and_records_file(uploads, store, settings, tmp_path):
    incoming = tmp_path / "incoming.tmp"
    incoming.write_bytes(b"x" * 100)

    record = await uploads.register_upload("alice", incoming, "My Clip (1).mov", "video/quicktime")

    assert record.kind == FileKind.ORIGINAL
    assert record.name == "My_Clip__1_.mov"
    assert record.size == 100
    assert record.media_type == "video/quicktime"
    assert Path(record.path) == settings.UPLOAD_DIR / f"{record.id}_My_Clip__1_.mov"
    assert Path(record.path).read_bytes() == b"x" * 100
    assert not incoming.exists()
    assert FileRepository(store.snapshot()).find_by_id(record.id, "alice") is not None


@pytest.mark.asyncio
async def test_nameless_upload_falls_back(uploads, tmp_path):
    incoming = tmp_path / "incoming.tmp"
    incoming.write_bytes(b"data")

    record = await uploads.register_upload("alice", incoming, "", None)

    assert record.name == "video"
    assert record.media_type == "application/octet-stream"


@pytest.mark.asyncio
async def test_save_upload_streams_to_storage(uploads, settings):
    record = await uploads.save_upload("alice", io.BytesIO(b"abc"), "a.mov", "video/quicktime")

    assert Path(record.path).read_bytes() == b"abc"
    assert not list(settings.UPLOAD_DIR.glob(".upload-*"))


@pytest.mark.asyncio
async def test_oversized_upload_is_rejected(uploads, store, settings):
    with pytest.raises(UploadTooLargeError):
        await uploads.save_upload("alice", io.BytesIO(b"x" * 2048), "big.mov", "video/quicktime")

    assert list(settings.UPLOAD_DIR.iterdir()) == []
    assert store.snapshot().files == []
