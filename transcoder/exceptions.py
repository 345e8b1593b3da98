"""
Custom exception classes for the application.

Failures discovered while serving a request are raised through these
classes. Failures discovered while a job runs in the background are recorded
on the job record instead, since nobody is waiting on the call stack.
"""


class ApplicationError(Exception):
    """Base exception for all application errors"""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when an entity is absent or owned by someone else"""

    def __init__(self, entity: str, entity_id: str, message: str | None = None):
        details = {"entity": entity, "id": entity_id}
        super().__init__(message or f"{entity} not found", details)


class InputNotFoundError(NotFoundError):
    """Raised when a transcode is requested for an unknown or foreign original"""

    def __init__(self, input_id: str):
        super().__init__("file", input_id, "Original video not found")


class DuplicateIdError(ApplicationError):
    """Raised when a record is inserted with an id that already exists"""

    def __init__(self, entity: str, entity_id: str):
        details = {"entity": entity, "id": entity_id}
        super().__init__(f"{entity} with id {entity_id} already exists", details)


class PersistenceError(ApplicationError):
    """Raised when the durable store cannot be read or written"""

    def __init__(self, operation: str, message: str):
        details = {"operation": operation}
        super().__init__(message, details)


class InvalidTransitionError(ApplicationError):
    """
    Raised on an illegal job status transition.

    Only the process supervisor drives transitions, so this always signals a
    programming error rather than bad user input.
    """

    def __init__(self, job_id: str, current: str, requested: str):
        details = {"job_id": job_id, "current": current, "requested": requested}
        super().__init__(f"Illegal transition for job {job_id}: {current} -> {requested}", details)


class ValidationError(ApplicationError):
    """Raised when request input fails validation"""

    def __init__(self, message: str, invalid_fields: dict | None = None):
        details = {"invalid_fields": invalid_fields} if invalid_fields else {}
        super().__init__(message, details)


class UploadTooLargeError(ApplicationError):
    """Raised when an upload exceeds the configured size limit"""

    def __init__(self, limit: int):
        details = {"limit_bytes": limit}
        super().__init__(f"Upload exceeds the {limit} byte limit", details)
