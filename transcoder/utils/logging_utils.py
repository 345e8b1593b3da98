"""
Structured Logging Utilities

Adds job/request context to log records so a single encode can be followed
through the log file even when several run concurrently.
"""

import logging
from contextvars import ContextVar
from typing import Any, Dict, Optional


# Context variable for task-scoped logging context. Each asyncio task gets
# its own copy, so workers never see each other's job ids.
_logging_context: ContextVar[Dict[str, Any]] = ContextVar('logging_context', default={})


class ContextFilter(logging.Filter):
    """
    Renders the current logging context into the record.

    Sets `record.context` to a string like " [job_id=abc owner=u1]" (or "")
    so formatters can include it with %(context)s.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        context = getattr(record, "structured", None) or _logging_context.get()
        if context:
            pairs = " ".join(f"{key}={value}" for key, value in context.items())
            record.context = f" [{pairs}]"
        else:
            record.context = ""
        return True


class StructuredLogger:
    """
    Wrapper around standard logger that adds structured context.

    Usage:
        logger = StructuredLogger(__name__)
        logger.info("Encoder started", extra={"pid": proc.pid})
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _add_context(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        context = _logging_context.get().copy()
        if extra:
            context.update(extra)
        return {"structured": context}

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.debug(message, extra=self._add_context(extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.info(message, extra=self._add_context(extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.warning(message, extra=self._add_context(extra))

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: bool = False):
        self.logger.error(message, extra=self._add_context(extra), exc_info=exc_info)


def set_logging_context(**kwargs):
    """
    Set logging context for the current task.

    Example:
        set_logging_context(job_id=job.id, owner=job.owner)
    """
    context = _logging_context.get().copy()
    context.update(kwargs)
    _logging_context.set(context)


def clear_logging_context():
    """Clear the logging context."""
    _logging_context.set({})
