import asyncio
import stat
import sys
import textwrap
from pathlib import Path

import pytest
import pytest_asyncio

from transcoder.config import Settings
from transcoder.constants import FileKind
from transcoder.database import DocumentStore
from transcoder.models import File
from transcoder.repositories import FileRepository, JobRepository
from transcoder.services.store_writer import StoreWriter


def _write_script(path: Path, body: str) -> str:
    path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


@pytest.fixture
def ok_encoder(tmp_path):
    """Stand-in ffmpeg that writes a small output and exits 0"""
    return _write_script(tmp_path / "ok-encoder", """
        import sys
        with open(sys.argv[-1], "wb") as out:
            out.write(b"\\x00" * 2048)
        sys.stderr.write("frame=1 fps=0.0\\rframe=2 fps=0.0\\n")
    """)


@pytest.fixture
def failing_encoder(tmp_path):
    """Stand-in ffmpeg that leaves a partial output and exits 1"""
    return _write_script(tmp_path / "failing-encoder", """
        import sys
        with open(sys.argv[-1], "wb") as out:
            out.write(b"partial")
        sys.stderr.write("Invalid data found when processing input\\n")
        sys.exit(1)
    """)


@pytest.fixture
def hanging_encoder(tmp_path):
    """Stand-in ffmpeg that starts writing and never finishes; leaves its pid in <output>.pid"""
    return _write_script(tmp_path / "hanging-encoder", """
        import os, sys, time
        with open(sys.argv[-1] + ".pid", "w") as pid_file:
            pid_file.write(str(os.getpid()))
        with open(sys.argv[-1], "wb") as out:
            out.write(b"partial")
        time.sleep(60)
    """)


@pytest.fixture
def silent_encoder(tmp_path):
    """Stand-in ffmpeg that exits 0 without producing an output"""
    return _write_script(tmp_path / "silent-encoder", """
        import sys
        sys.exit(0)
    """)


@pytest.fixture
def recording_encoder(tmp_path):
    """Stand-in ffmpeg that records its argv next to the output"""
    return _write_script(tmp_path / "recording-encoder", """
        import json, sys
        with open(sys.argv[-1], "wb") as out:
            out.write(b"mp4")
        with open(sys.argv[-1] + ".argv.json", "w") as log:
            json.dump(sys.argv[1:], log)
    """)


@pytest.fixture
def missing_encoder(tmp_path):
    return str(tmp_path / "no-such-encoder")


@pytest.fixture
def settings(tmp_path, ok_encoder):
    settings = Settings(data_dir=tmp_path / "data")
    settings.ENCODER_BINARY = ok_encoder
    settings.MAX_WORKERS = 2
    settings.MAX_ENCODE_SECONDS = None
    settings.ensure_dirs()
    return settings


@pytest.fixture
def document_store(settings):
    return DocumentStore(settings.DOCUMENT_PATH)


@pytest_asyncio.fixture
async def store(document_store):
    writer = StoreWriter(document_store)
    await writer.start()
    yield writer
    await writer.stop()


@pytest.fixture
def make_original(settings):
    """Create an original on disk and return a store command registering it"""
    def _make(file_id="in-1", owner="alice", name="clip.mov", content=b"source video"):
        path = settings.UPLOAD_DIR / f"{file_id}_{name}"
        path.write_bytes(content)
        record = File(
            id=file_id,
            owner=owner,
            kind=FileKind.ORIGINAL,
            name=name,
            path=str(path),
            size=len(content),
            media_type="video/quicktime",
        )
        return lambda state: FileRepository(state).register(record)
    return _make


async def wait_for_terminal(store: StoreWriter, job_id: str, timeout: float = 15.0):
    """Poll the committed State until the job is done or failed"""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        job = JobRepository(store.snapshot()).get_by_id(job_id)
        if job is not None and job.is_terminal:
            return job
        await asyncio.sleep(0.05)
    raise AssertionError(f"Job {job_id} did not finish within {timeout}s")


class RecordingPool:
    """Collects dispatched jobs instead of running them"""

    def __init__(self):
        self.submitted = []

    def submit(self, request):
        self.submitted.append(request)


@pytest.fixture
def recording_pool():
    return RecordingPool()
