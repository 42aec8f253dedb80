"""Business logic for deleting an entity together with its images.

Storage cleanup is best effort: a failed object removal is logged and
the record is deleted anyway. Leaking an object is preferred over a row
that can never be deleted.
"""

from typing import Any

from aws_lambda_powertools import Logger

from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.media.buckets import resolve_bucket
from core.media.paths import decode_key, entity_prefix
from core.models.entity import ADDITIONAL_IMAGES_FIELD, EntityType, main_image_field
from core.models.result import capture
from core.repositories.record_repository import EntityRecordRepository
from core.repositories.storage_repository import ObjectStorageRepository
from core.utils.time import utc_now_iso

logger = Logger(UTC=True)


class DeleteService:
    """Application service responsible for deleting entities.

    This service orchestrates:
    - Ownership validation
    - Resolution of every stored asset reference into an object key
    - Best-effort removal of each object, then a sweep of the entity prefix
    - Deletion of the entity record
    """

    def __init__(self, storage: ObjectStorageRepository | None = None) -> None:
        self.storage = storage or S3ImageStorage()

    def delete_entity(
        self,
        *,
        records: EntityRecordRepository,
        entity_id: str,
        entity_type: EntityType,
        caller_id: str,
    ) -> dict[str, Any]:
        """Delete an entity's images and then its record.

        Raises:
            NotFoundError: If the entity does not exist
            ForbiddenError: If the caller does not own the entity
            RecordOperationFailedError: If the record deletion fails
        """
        logger.debug(
            "Starting entity deletion",
            extra={"entity_id": entity_id, "entity_type": entity_type.value},
        )

        record = records.fetch_owned(entity_id=entity_id, owner_id=caller_id)
        bucket = resolve_bucket(entity_type)

        keys = self.referenced_keys(record, entity_type)
        removed, failed = self._remove_keys(bucket, keys)

        # Objects never recorded, plus a retry of referenced keys that failed
        leftovers = capture(
            self.storage.remove_prefix, bucket=bucket, prefix=entity_prefix(entity_id)
        )
        if leftovers.is_ok:
            swept = leftovers.unwrap()
            removed.extend(key for key in swept if key not in removed)
            failed = [key for key in failed if key not in swept]
        else:
            logger.warning(
                "Could not sweep remaining entity images",
                extra={"bucket": bucket, "entity_id": entity_id, "error": str(leftovers.error)},
            )

        records.delete_record(entity_id=entity_id, owner_id=caller_id)

        logger.info(
            "Entity deleted",
            extra={
                "entity_id": entity_id,
                "removed": len(removed),
                "failed": len(failed),
            },
        )

        return {
            "entity_id": entity_id,
            "removed_keys": removed,
            "failed_keys": failed,
            "deleted_at": utc_now_iso(),
        }

    @staticmethod
    def referenced_keys(record: dict[str, Any], entity_type: EntityType) -> list[str]:
        """Object keys for the main and additional references, deduplicated in order."""
        bucket = resolve_bucket(entity_type)
        references = [record.get(main_image_field(entity_type))]
        references.extend(record.get(ADDITIONAL_IMAGES_FIELD) or [])

        keys: list[str] = []
        for reference in references:
            key = decode_key(reference, bucket)
            if key is not None and key not in keys:
                keys.append(key)
        return keys

    def _remove_keys(self, bucket: str, keys: list[str]) -> tuple[list[str], list[str]]:
        removed: list[str] = []
        failed: list[str] = []

        for key in keys:
            result = capture(self.storage.remove_object, bucket=bucket, key=key)
            if result.is_ok:
                removed.append(key)
            else:
                logger.warning(
                    "Failed to remove entity image",
                    extra={"bucket": bucket, "key": key, "error": str(result.error)},
                )
                failed.append(key)

        return removed, failed
