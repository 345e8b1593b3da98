from pathlib import Path

import pytest

from transcoder.constants import JobStatus
from transcoder.repositories import FileRepository, JobRepository
from transcoder.services.job_orchestrator import JobOrchestrator
from transcoder.services.process_supervisor import ProcessSupervisor
from transcoder.dtos.internal import DispatchRequest
from transcoder.workers.encoder_runner import EncoderRunner


@pytest.fixture
def queue_job(store, recording_pool, settings, make_original):
    """Register an original plus a queued job and return its dispatch"""
    async def _queue(owner="alice", name="clip.mov"):
        await store.commit(make_original("in-1", owner=owner, name=name))
        orchestrator = JobOrchestrator(store, recording_pool, settings.OUTPUT_DIR)
        await orchestrator.request_transcode("in-1", owner)
        return recording_pool.submitted[-1]
    return _queue


def _output(store, job):
    return FileRepository(store.snapshot()).get_by_id(job.output_id)


@pytest.mark.asyncio
async def test_successful_encode_marks_done_and_records_size(store, queue_job, ok_encoder):
    dispatch = await queue_job(name="clip.mov")
    supervisor = ProcessSupervisor(store, EncoderRunner(binary=ok_encoder))

    job = await supervisor.run(dispatch)

    assert job.status == JobStatus.DONE
    assert job.started_at is not None and job.finished_at is not None
    assert job.error is None
    output = _output(store, job)
    assert output.name == "clip_transcoded.mp4"
    assert output.size == 2048
    assert Path(output.path).stat().st_size == 2048


@pytest.mark.asyncio
async def test_missing_encoder_fails_without_output(store, queue_job, missing_encoder):
    dispatch = await queue_job()
    supervisor = ProcessSupervisor(store, EncoderRunner(binary=missing_encoder))

    job = await supervisor.run(dispatch)

    assert job.status == JobStatus.ERROR
    assert job.error.startswith("failed to launch encoder")
    assert not Path(dispatch.output_path).exists()
    assert _output(store, job).size == 0


@pytest.mark.asyncio
async def test_non_zero_exit_removes_partial_output(store, queue_job, failing_encoder):
    dispatch = await queue_job()
    supervisor = ProcessSupervisor(store, EncoderRunner(binary=failing_encoder))

    job = await supervisor.run(dispatch)

    assert job.status == JobStatus.ERROR
    assert job.error == "encoder exited with code 1"
    assert not Path(dispatch.output_path).exists()
    assert _output(store, job).size == 0


@pytest.mark.asyncio
async def test_timeout_kills_encoder_and_fails_job(store, queue_job, hanging_encoder):
    dispatch = await queue_job()
    supervisor = ProcessSupervisor(store, EncoderRunner(binary=hanging_encoder, timeout=1))

    job = await supervisor.run(dispatch)

    assert job.status == JobStatus.ERROR
    assert job.error == "encoder timed out after 1 seconds"
    assert not Path(dispatch.output_path).exists()


@pytest.mark.asyncio
async def test_each_transition_is_persisted(store, queue_job, ok_encoder, monkeypatch):
    dispatch = await queue_job()
    persisted = []
    real_save = store.store.save

    def recording_save(state):
        job = JobRepository(state).get_by_id(dispatch.job_id)
        persisted.append(job.status if job else None)
        real_save(state)

    monkeypatch.setattr(store.store, "save", recording_save)

    await ProcessSupervisor(store, EncoderRunner(binary=ok_encoder)).run(dispatch)

    assert persisted == [JobStatus.RUNNING, JobStatus.DONE]


@pytest.mark.asyncio
async def test_missing_job_is_skipped(store, ok_encoder, tmp_path):
    supervisor = ProcessSupervisor(store, EncoderRunner(binary=ok_encoder))

    result = await supervisor.run(DispatchRequest("ghost", "in.mov", str(tmp_path / "out.mp4")))

    assert result is None
    assert not (tmp_path / "out.mp4").exists()


@pytest.mark.asyncio
async def test_finished_job_is_not_run_again(store, queue_job, ok_encoder, failing_encoder):
    dispatch = await queue_job()
    await ProcessSupervisor(store, EncoderRunner(binary=ok_encoder)).run(dispatch)

    again = await ProcessSupervisor(store, EncoderRunner(binary=failing_encoder)).run(dispatch)

    assert again is None
    job = JobRepository(store.snapshot()).get_by_id(dispatch.job_id)
    assert job.status == JobStatus.DONE
    assert Path(dispatch.output_path).exists()


@pytest.mark.asyncio
async def test_unreadable_output_size_still_completes(store, queue_job, silent_encoder):
    dispatch = await queue_job()
    supervisor = ProcessSupervisor(store, EncoderRunner(binary=silent_encoder))

    job = await supervisor.run(dispatch)

    assert job.status == JobStatus.DONE
    assert job.error is None
    assert _output(store, job).size == 0


@pytest.mark.asyncio
async def test_failed_cleanup_still_records_exit_code(store, queue_job, failing_encoder, monkeypatch):
    dispatch = await queue_job()
    real_unlink = Path.unlink

    def guarded_unlink(self, *args, **kwargs):
        if str(self) == dispatch.output_path:
            raise PermissionError(13, "Permission denied", str(self))
        return real_unlink(self, *args, **kwargs)

    monkeypatch.setattr(Path, "unlink", guarded_unlink)
    supervisor = ProcessSupervisor(store, EncoderRunner(binary=failing_encoder))

    job = await supervisor.run(dispatch)

    assert job.status == JobStatus.ERROR
    assert job.error == "encoder exited with code 1"
    assert Path(dispatch.output_path).exists()
    assert _output(store, job).size == 0
