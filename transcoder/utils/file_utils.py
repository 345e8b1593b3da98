"""
Filesystem helpers shared by the job subsystem.
"""
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def remove_partial_output(path: str | Path) -> bool:
    """
    Best-effort removal of an encoder output that must not be served.

    Returns:
        True if a file was removed, False if there was nothing to remove
        or removal failed (the failure is logged, never raised)
    """
    target = Path(path)
    try:
        target.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(f"Could not remove partial output {target}: {e}")
        return False
    logger.info(f"🗑️  Removed partial output {target}")
    return True


def file_size(path: str | Path) -> int | None:
    """Size of a file in bytes, or None if it cannot be stat'ed."""
    try:
        return Path(path).stat().st_size
    except OSError as e:
        logger.warning(f"Could not stat {path}: {e}")
        return None
