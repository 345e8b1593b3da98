"""
Repository layer for data access abstraction.

Repositories wrap the lists inside a State document and provide the lookups
and mutations the services need. They never save; committing is the
StoreWriter's job.
"""

from .base_repository import BaseRepository
from .file_repository import FileRepository
from .job_repository import JobRepository

__all__ = [
    "BaseRepository",
    "FileRepository",
    "JobRepository",
]
