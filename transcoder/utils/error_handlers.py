"""
Error handling decorators for API endpoints.

Maps application exceptions onto HTTP responses in one place so endpoints
only deal with the happy path.
"""

import inspect
import logging
from functools import wraps
from typing import Callable

from fastapi import HTTPException

from transcoder.constants import HTTPStatus
from transcoder.exceptions import (
    ApplicationError,
    DuplicateIdError,
    NotFoundError,
    PersistenceError,
    UploadTooLargeError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _to_http_exception(operation_name: str, error: Exception) -> HTTPException:
    if isinstance(error, NotFoundError):
        logger.info(f"{operation_name} - Not found: {error.message}")
        return HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=error.message)
    if isinstance(error, ValidationError):
        logger.warning(f"{operation_name} - Validation error: {error.message}")
        return HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=error.message)
    if isinstance(error, UploadTooLargeError):
        logger.warning(f"{operation_name} - {error.message}")
        return HTTPException(status_code=HTTPStatus.PAYLOAD_TOO_LARGE, detail=error.message)
    if isinstance(error, DuplicateIdError):
        logger.error(f"{operation_name} - Id collision: {error.message}")
        return HTTPException(status_code=HTTPStatus.CONFLICT, detail=error.message)
    if isinstance(error, PersistenceError):
        logger.error(f"{operation_name} - Persistence error: {error.message}", exc_info=error)
        return HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail="Database operation failed",
        )
    if isinstance(error, ApplicationError):
        logger.error(f"{operation_name} - Application error: {error.message}", exc_info=error)
        return HTTPException(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            detail=f"{operation_name} failed: {error.message}",
        )
    logger.error(f"{operation_name} - Unexpected error: {error}", exc_info=error)
    return HTTPException(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        detail=f"{operation_name} failed. Please check server logs.",
    )


def handle_api_errors(operation_name: str):
    """
    Decorator to handle application errors consistently across endpoints.

    Args:
        operation_name: Human-readable name of the operation (e.g., "Transcode request")

    Example:
        @router.post("/transcode/{file_id}")
        @handle_api_errors("Transcode request")
        async def transcode(...):
            return await orchestrator.request_transcode(...)
    """
    def decorator(func: Callable):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                # Preserve status code and detail
                raise
            except Exception as e:
                raise _to_http_exception(operation_name, e) from e

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except HTTPException:
                raise
            except Exception as e:
                raise _to_http_exception(operation_name, e) from e

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
