"""
Runtime configuration.

Values are read from TRANSCODER_* environment variables when a Settings
instance is created, so tests can build an isolated instance after patching
the environment.
"""
import os
import shutil
from pathlib import Path
from typing import Optional

from transcoder.constants import EncoderDefaults, ServerConfig, StorageDefaults


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return int(raw)


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return float(raw)


class Settings:
    def __init__(self, data_dir: Optional[Path] = None):
        # --- Paths ---
        self.DATA_DIR: Path = Path(
            data_dir or os.getenv("TRANSCODER_DATA_DIR", StorageDefaults.DATA_DIR)
        ).resolve()
        self.DOCUMENT_PATH: Path = self.DATA_DIR / StorageDefaults.DOCUMENT_NAME
        self.UPLOAD_DIR: Path = self.DATA_DIR / StorageDefaults.UPLOADS_DIR
        self.OUTPUT_DIR: Path = self.DATA_DIR / StorageDefaults.OUTPUTS_DIR
        self.LOG_DIR: Path = self.DATA_DIR / StorageDefaults.LOGS_DIR

        # --- Encoder ---
        # Auto-detect ffmpeg or use env var
        self.ENCODER_BINARY: str = os.getenv(
            "TRANSCODER_ENCODER_BINARY",
            shutil.which(EncoderDefaults.BINARY) or EncoderDefaults.BINARY,
        )
        self.VIDEO_CODEC: str = os.getenv("TRANSCODER_VIDEO_CODEC", EncoderDefaults.VIDEO_CODEC)
        self.PRESET: str = os.getenv("TRANSCODER_PRESET", EncoderDefaults.PRESET)
        self.CRF: int = _env_int("TRANSCODER_CRF", EncoderDefaults.CRF)
        self.AUDIO_CODEC: str = os.getenv("TRANSCODER_AUDIO_CODEC", EncoderDefaults.AUDIO_CODEC)
        self.AUDIO_BITRATE: str = os.getenv("TRANSCODER_AUDIO_BITRATE", EncoderDefaults.AUDIO_BITRATE)

        # --- Job execution ---
        # Caps simultaneous encoder processes
        self.MAX_WORKERS: int = max(1, _env_int("TRANSCODER_MAX_WORKERS", os.cpu_count() or 1))
        # None disables the timeout
        self.MAX_ENCODE_SECONDS: Optional[float] = _env_float("TRANSCODER_MAX_ENCODE_SECONDS", None)

        # --- Server ---
        self.HOST: str = os.getenv("TRANSCODER_HOST", ServerConfig.HOST)
        self.PORT: int = _env_int("TRANSCODER_PORT", ServerConfig.PORT)
        self.MAX_UPLOAD_BYTES: int = _env_int("TRANSCODER_MAX_UPLOAD_BYTES", StorageDefaults.MAX_UPLOAD_BYTES)
        self.LOG_LEVEL: str = os.getenv("TRANSCODER_LOG_LEVEL", "INFO").upper()

    def ensure_dirs(self):
        """Creates the data directory tree if it doesn't exist."""
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)
        self.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
        self.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
        self.LOG_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
