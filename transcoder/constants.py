"""
Application-wide constants.

This module centralizes the magic strings and numbers shared by the store,
the job subsystem and the API layer.
"""
from enum import Enum


class FileKind(str, Enum):
    """Where a file record came from."""

    ORIGINAL = "original"        # Uploaded by a user
    TRANSCODED = "transcoded"    # Produced (or being produced) by a job


class JobStatus(str, Enum):
    """
    Transcode job lifecycle.

    queued -> running -> done | error. DONE and ERROR are terminal.
    """

    QUEUED = "queued"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.DONE, JobStatus.ERROR)


# Legal job transitions, keyed by current status
JOB_TRANSITIONS = {
    JobStatus.QUEUED: frozenset({JobStatus.RUNNING}),
    JobStatus.RUNNING: frozenset({JobStatus.DONE, JobStatus.ERROR}),
    JobStatus.DONE: frozenset(),
    JobStatus.ERROR: frozenset(),
}


class EncoderDefaults:
    """Default ffmpeg parameters for the normalized MP4 output"""

    BINARY = "ffmpeg"
    VIDEO_CODEC = "libx264"
    PRESET = "veryslow"
    CRF = 23
    AUDIO_CODEC = "aac"
    AUDIO_BITRATE = "128k"
    STDERR_TAIL_LINES = 20  # Encoder stderr lines kept for the log on failure


class OutputNaming:
    """Naming rules for transcoded outputs"""

    SUFFIX = "_transcoded"
    EXTENSION = ".mp4"
    MEDIA_TYPE = "video/mp4"
    FALLBACK_UPLOAD_NAME = "video"


class StorageDefaults:
    """Layout of the data directory"""

    DATA_DIR = "data"
    DOCUMENT_NAME = "db.json"
    UPLOADS_DIR = "uploads"
    OUTPUTS_DIR = "outputs"
    LOGS_DIR = "logs"
    LOG_FILE = "transcoder.log"
    MAX_UPLOAD_BYTES = 1024 * 1024 * 1024  # 1 GiB


class ErrorMessages:
    """Human-readable job error strings stored on failed jobs"""

    LAUNCH_FAILED = "failed to launch encoder: {reason}"
    EXIT_CODE = "encoder exited with code {code}"
    TIMED_OUT = "encoder timed out after {seconds} seconds"
    INTERRUPTED = "interrupted by service restart"


class ServerConfig:
    """Server configuration constants"""

    HOST = "0.0.0.0"
    PORT = 3000


class HTTPStatus:
    """HTTP status codes used by the API layer"""

    OK = 200
    CREATED = 201
    ACCEPTED = 202

    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    NOT_FOUND = 404
    CONFLICT = 409
    GONE = 410
    PAYLOAD_TOO_LARGE = 413

    INTERNAL_SERVER_ERROR = 500
