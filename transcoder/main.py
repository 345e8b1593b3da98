import logging
import socket
import sys
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from typing import Optional

from fastapi import FastAPI

from transcoder import __version__
from transcoder.api import files, jobs
from transcoder.config import Settings, settings as default_settings
from transcoder.constants import StorageDefaults
from transcoder.dtos.response import HealthResponse
from transcoder.services.runtime import ServiceRuntime
from transcoder.utils.logging_utils import ContextFilter

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s%(context)s'


def configure_logging(settings: Settings):
    """Rotating file log under the data directory plus stdout."""
    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = settings.LOG_DIR / StorageDefaults.LOG_FILE
    log_formatter = logging.Formatter(LOG_FORMAT)
    context_filter = ContextFilter()

    # File handler with rotation (10MB per file, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(log_formatter)
    file_handler.addFilter(context_filter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    console_handler.addFilter(context_filter)

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.LOG_LEVEL)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logger.info(f"Logging initialized: {log_file}")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    runtime = ServiceRuntime(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifespan - startup and shutdown"""
        logger.info("Starting transcoder services...")
        await runtime.start()
        logger.info("✅ Transcoder ready")
        try:
            yield
        finally:
            logger.info("Shutting down transcoder services...")
            await runtime.stop()
            logger.info("Shutdown complete")

    app = FastAPI(
        title="Transcoder",
        description="Upload videos and transcode them to web-friendly MP4",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.runtime = runtime

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(ok=True)

    app.include_router(files.router, tags=["files"])
    app.include_router(jobs.router, tags=["jobs"])
    return app


app = create_app()


def _is_port_in_use(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((host, port))
            return False
        except OSError:
            return True


def run():
    """Console entry point."""
    import uvicorn

    settings = default_settings
    configure_logging(settings)

    if _is_port_in_use(settings.HOST, settings.PORT):
        logger.error(f"❌ Port {settings.PORT} is already in use!")
        logger.error("   Another transcoder instance may be running.")
        sys.exit(1)

    logger.info(f"🚀 Starting transcoder on http://{settings.HOST}:{settings.PORT}...")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
