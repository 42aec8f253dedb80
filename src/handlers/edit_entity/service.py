"""Business logic for editing an entity's fields and images in one save."""

from collections.abc import Sequence
from typing import Any

from aws_lambda_powertools import Logger

from core.media.buckets import resolve_bucket
from core.media.paths import decode_key, normalize_reference
from core.models.entity import ADDITIONAL_IMAGES_FIELD, EntityType
from core.models.errors import ValidationError
from core.models.pick import LocalPick
from core.models.result import capture
from core.repositories.record_repository import EntityRecordRepository
from handlers.upload_entity_image.service import UploadService, normalized_additional

Record = dict[str, Any]

logger = Logger(UTC=True)


class EditService:
    """Application service behind the edit screen.

    Order of a save:
    1. Check every new image, then upload the new main image and any
       appended images together
    2. Persist field edits and image keys in one record update
    3. Best-effort removal of the additional images the user dropped
    """

    def __init__(self, uploads: UploadService | None = None) -> None:
        self.uploads = uploads or UploadService()

    def edit_entity(
        self,
        *,
        records: EntityRecordRepository,
        entity_id: str,
        entity_type: EntityType,
        caller_id: str,
        fields: Record,
        main_pick: LocalPick | None = None,
        additional_picks: Sequence[LocalPick] = (),
        remove_additional: Sequence[str] = (),
    ) -> Record:
        """Apply an edit and return the updated record.

        Raises:
            ValidationError: If the edit changes nothing or exceeds the image limit
            NotFoundError: If the entity does not exist
            ForbiddenError: If the caller does not own the entity
            ImageProcessingError: If a new image cannot be decoded; storage is untouched
            ImageUploadFailedError: If an upload fails; nothing is persisted
        """
        if not fields and main_pick is None and not additional_picks and not remove_additional:
            raise ValidationError(message="Nothing to update")

        record = records.fetch_owned(entity_id=entity_id, owner_id=caller_id)

        removed = {
            key
            for key in (normalize_reference(ref, entity_type) for ref in remove_additional)
            if key
        }
        current = normalized_additional(record, entity_type)
        kept = [key for key in current if key not in removed]
        dropped = [key for key in current if key in removed]

        changes: Record = dict(fields)

        if main_pick is not None or additional_picks:
            save = self.uploads.plan_save(
                record=record,
                entity_id=entity_id,
                entity_type=entity_type,
                main_picks=[main_pick] if main_pick is not None else (),
                additional_picks=additional_picks,
                kept_additional=kept,
            )
            self.uploads.execute(save, entity_id=entity_id)
            changes.update(save.changes)

        if not additional_picks and dropped:
            changes[ADDITIONAL_IMAGES_FIELD] = kept

        updated = records.update_record(
            entity_id=entity_id,
            owner_id=caller_id,
            changes=changes,
        )

        self._remove_dropped(entity_type, dropped)

        logger.info(
            "Entity edited",
            extra={
                "entity_id": entity_id,
                "fields": sorted(changes),
                "dropped_images": len(dropped),
            },
        )
        return updated

    def _remove_dropped(self, entity_type: EntityType, dropped: list[str]) -> None:
        bucket = resolve_bucket(entity_type)

        for reference in dropped:
            key = decode_key(reference, bucket)
            if key is None:
                continue

            result = capture(self.uploads.storage.remove_object, bucket=bucket, key=key)
            if not result.is_ok:
                logger.warning(
                    "Failed to remove dropped image",
                    extra={"bucket": bucket, "key": key, "error": str(result.error)},
                )
