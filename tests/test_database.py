import json

import pytest

from transcoder.constants import FileKind
from transcoder.database import DocumentStore
from transcoder.exceptions import PersistenceError
from transcoder.models import File, Job, State


def test_load_initializes_missing_document(tmp_path):
    path = tmp_path / "db.json"
    store = DocumentStore(path)

    state = store.load()

    assert state.files == [] and state.jobs == []
    assert json.loads(path.read_text()) == {"files": [], "jobs": []}


def test_saved_state_survives_reload(tmp_path):
    path = tmp_path / "db.json"
    state = State(
        files=[File(id="f1", owner="alice", kind=FileKind.ORIGINAL, name="a.mov", path="/x/a.mov", size=3)],
        jobs=[Job(id="j1", owner="alice", input_id="f1", output_id="f2")],
    )
    DocumentStore(path).save(state)

    reloaded = DocumentStore(path).load()

    assert reloaded == state


def test_save_leaves_no_temp_files(tmp_path):
    store = DocumentStore(tmp_path / "db.json")
    store.save(State())
    store.save(State())

    assert [p.name for p in tmp_path.iterdir()] == ["db.json"]


def test_corrupt_document_raises_persistence_error(tmp_path):
    path = tmp_path / "db.json"
    path.write_text('{"files": [{"id": 1}]')

    with pytest.raises(PersistenceError) as exc_info:
        DocumentStore(path).load()
    assert exc_info.value.details["operation"] == "load"


def test_unwritable_location_raises_persistence_error(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")

    with pytest.raises(PersistenceError) as exc_info:
        DocumentStore(blocker / "db.json").save(State())
    assert exc_info.value.details["operation"] == "save"
