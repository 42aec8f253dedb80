"""Abstract contract for entity record persistence."""

from abc import ABC, abstractmethod
from typing import Any

from core.models.errors import ForbiddenError, NotFoundError

Record = dict[str, Any]


class EntityRecordRepository(ABC):
    """Contract for the listing, buy-order and profile tables.

    Every write is scoped by the caller's id through the table's owner
    field. Implementations make exactly one remote call per operation and
    never retry.
    """

    owner_field: str

    @abstractmethod
    def insert_record(self, *, item: Record) -> Record:
        """Insert a new record.

        Raises:
            ValidationError: If the item lacks its id or owner field
            RecordOperationFailedError: If the insert fails or the id exists
        """

    @abstractmethod
    def fetch_record(self, *, entity_id: str) -> Record | None:
        """Fetch one record, or None if it does not exist.

        Raises:
            RecordOperationFailedError: If the fetch fails
        """

    @abstractmethod
    def list_owned(self, *, owner_id: str, limit: int) -> list[Record]:
        """List records owned by `owner_id`, newest first.

        Raises:
            ValidationError: If limit is out of range
            RecordOperationFailedError: If the query fails
        """

    @abstractmethod
    def update_record(
        self,
        *,
        entity_id: str,
        owner_id: str,
        changes: Record,
    ) -> Record:
        """Apply `changes` to a record owned by `owner_id` and return it.

        Raises:
            NotFoundError: If the record does not exist
            ForbiddenError: If the record belongs to someone else
            RecordOperationFailedError: If the update fails
        """

    @abstractmethod
    def delete_record(self, *, entity_id: str, owner_id: str) -> None:
        """Delete a record owned by `owner_id`.

        Raises:
            NotFoundError: If the record does not exist
            ForbiddenError: If the record belongs to someone else
            RecordOperationFailedError: If the delete fails
        """

    @abstractmethod
    def find_by_field(self, *, index_name: str, field: str, value: str) -> list[Record]:
        """Look records up through a secondary index keyed on `field`.

        Raises:
            RecordOperationFailedError: If the query fails
        """

    def fetch_owned(self, *, entity_id: str, owner_id: str) -> Record:
        """Fetch a record and check that `owner_id` owns it.

        Raises:
            NotFoundError: If the record does not exist
            ForbiddenError: If the record belongs to someone else
        """
        record = self.fetch_record(entity_id=entity_id)

        if record is None:
            raise NotFoundError(
                message="Record not found",
                details={"id": entity_id},
            )

        if record.get(self.owner_field) != owner_id:
            raise ForbiddenError(
                message="You can only modify your own records",
                details={"id": entity_id},
            )

        return record
