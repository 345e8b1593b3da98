"""
Durable store.

Persists the State document as one JSON file. Every save rewrites the whole
document through a temp file in the same directory followed by os.replace,
so readers and restarts see either the previous or the new document, never
a partial one.
"""
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from transcoder.exceptions import PersistenceError
from transcoder.models import State

logger = logging.getLogger(__name__)


class DocumentStore:
    """Loads and saves the State document at a fixed path."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> State:
        """
        Read the persisted State.

        Initializes (and writes) an empty document on first use.

        Raises:
            PersistenceError: If the document exists but cannot be read or parsed
        """
        if not self.path.exists():
            logger.info(f"No store document at {self.path}, initializing empty state")
            state = State()
            self.save(state)
            return state

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError("load", f"Failed to read store document {self.path}: {e}") from e

        try:
            state = State.model_validate_json(raw)
        except PydanticValidationError as e:
            raise PersistenceError("load", f"Store document {self.path} is corrupt: {e}") from e

        logger.info(f"Loaded store: {len(state.files)} files, {len(state.jobs)} jobs")
        return state

    def save(self, state: State) -> None:
        """
        Atomically replace the persisted document with `state`.

        Raises:
            PersistenceError: If the document cannot be written
        """
        payload = state.model_dump_json(indent=2)

        tmp_fd = None
        tmp_path: Path | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_fd, tmp_name = tempfile.mkstemp(
                dir=str(self.path.parent),
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            )
            tmp_path = Path(tmp_name)
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as handle:
                tmp_fd = None  # ownership transferred to the file object
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())

            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise PersistenceError("save", f"Failed to write store document {self.path}: {e}") from e
        finally:
            if tmp_fd is not None:
                os.close(tmp_fd)
            if tmp_path is not None and tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    logger.warning(f"Failed to clean up temporary store file {tmp_path}")
