"""
File repository: the registry of uploaded originals and transcoded outputs.
"""

from typing import Optional

from transcoder.models import File, State
from .base_repository import BaseRepository


class FileRepository(BaseRepository[File]):
    """Repository for File records."""

    entity_name = "file"

    def __init__(self, state: State):
        super().__init__(state.files)

    def register(self, file: File) -> File:
        """
        Register a new file.

        Raises:
            DuplicateIdError: If the id is already taken
        """
        return self.create(file)

    def find_by_id(self, file_id: str, owner: str) -> Optional[File]:
        """Owner-scoped lookup; None for both missing and foreign files."""
        return self.get_owned(file_id, owner)

    def update_size(self, file_id: str, size: int) -> Optional[File]:
        """
        Record the byte size of a file.

        Args:
            file_id: File id
            size: Size in bytes

        Returns:
            Updated file, or None if not found
        """
        file = self.get_by_id(file_id)
        if file:
            file.size = size
        return file
