"""
Base repository providing common record operations over a State collection.
"""

from typing import Generic, List, Optional, TypeVar, Any

from transcoder.exceptions import DuplicateIdError

T = TypeVar('T')


class BaseRepository(Generic[T]):
    """
    Generic base repository over one list inside a State document.

    Repositories mutate the State they are given in place. Callers get a
    working copy from the StoreWriter, so a change only becomes durable when
    the enclosing store command returns and the copy is saved.
    """

    entity_name = "record"

    def __init__(self, records: List[T]):
        """
        Initialize the repository.

        Args:
            records: The State list this repository manages
        """
        self.records = records

    def create(self, obj: T) -> T:
        """
        Insert a new record.

        Args:
            obj: Record to insert

        Returns:
            The inserted record

        Raises:
            DuplicateIdError: If a record with the same id already exists
        """
        if self.exists(obj.id):
            raise DuplicateIdError(self.entity_name, obj.id)
        self.records.append(obj)
        return obj

    def get_by_id(self, id: str) -> Optional[T]:
        """
        Retrieve a record by its id, regardless of owner.

        Internal use only: anything answering a user request goes through
        get_owned().
        """
        for record in self.records:
            if record.id == id:
                return record
        return None

    def get_owned(self, id: str, owner: str) -> Optional[T]:
        """
        Retrieve a record by id, scoped to its owner.

        A record owned by someone else is reported exactly like a missing one.
        """
        record = self.get_by_id(id)
        if record is None or record.owner != owner:
            return None
        return record

    def exists(self, id: str) -> bool:
        return self.get_by_id(id) is not None

    def filter_by(self, **filters: Any) -> List[T]:
        """
        Filter records by attribute equality.

        Args:
            **filters: Attribute names and the values they must equal

        Returns:
            Matching records in insertion order
        """
        return [
            record for record in self.records
            if all(getattr(record, key) == value for key, value in filters.items())
        ]

    def list_by_owner(self, owner: str) -> List[T]:
        """All of an owner's records, newest first."""
        return sorted(self.filter_by(owner=owner), key=lambda r: r.created_at, reverse=True)
