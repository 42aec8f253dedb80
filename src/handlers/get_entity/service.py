"""Read-side service that renders entity records for display."""

from typing import Any

from aws_lambda_powertools import Logger

from core.media.presenter import present_record
from core.models.entity import EntityType
from core.models.errors import NotFoundError
from core.repositories.record_repository import EntityRecordRepository

Record = dict[str, Any]

logger = Logger(UTC=True)


class GetService:
    """Fetch records and resolve their asset references into public URLs."""

    def __init__(self, base_url: str | None = None) -> None:
        self.base_url = base_url

    def get_entity(
        self,
        *,
        records: EntityRecordRepository,
        entity_id: str,
        entity_type: EntityType,
    ) -> Record:
        """
        Raises:
            NotFoundError: If the entity does not exist or was soft-deleted
        """
        record = records.fetch_record(entity_id=entity_id)

        if record is None or record.get("is_deleted"):
            raise NotFoundError(
                message="Record not found",
                details={"id": entity_id},
            )

        return present_record(record, entity_type, base_url=self.base_url)

    def list_owned(
        self,
        *,
        records: EntityRecordRepository,
        entity_type: EntityType,
        owner_id: str,
        limit: int,
    ) -> list[Record]:
        items = records.list_owned(owner_id=owner_id, limit=limit)
        logger.debug(
            "Listed owned records",
            extra={"owner_id": owner_id, "count": len(items)},
        )
        return [
            present_record(item, entity_type, base_url=self.base_url)
            for item in items
            if not item.get("is_deleted")
        ]
