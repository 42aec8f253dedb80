"""Business logic for creating a listing or buy-order with its images."""

import uuid
from collections.abc import Sequence
from typing import Any

from aws_lambda_powertools import Logger

from core.models.entity import EntityType
from core.models.pick import LocalPick
from core.repositories.record_repository import EntityRecordRepository
from core.utils.constants import ENTITY_STATUS_ACTIVE
from core.utils.time import utc_now_iso
from handlers.upload_entity_image.service import UploadService

Record = dict[str, Any]

logger = Logger(UTC=True)


class CreateService:
    """Application service responsible for entity creation.

    Every pick is checked and keyed before the record is inserted, so a
    rejected image creates nothing. The record is then inserted without
    images and the uploads run. The first pick becomes the main image and
    the rest are appended as additional images; both key sets are persisted
    in a single update. A failed upload leaves the record in place without images.
    """

    def __init__(self, uploads: UploadService | None = None) -> None:
        self.uploads = uploads or UploadService()

    @staticmethod
    def generate_entity_id() -> str:
        return str(uuid.uuid4())

    def create_entity(
        self,
        *,
        records: EntityRecordRepository,
        entity_type: EntityType,
        caller_id: str,
        fields: Record,
        picks: Sequence[LocalPick] = (),
    ) -> Record:
        """Insert a new entity owned by the caller and attach its images.

        Raises:
            ValidationError: If there are more images than an entity can hold
            ImageProcessingError: If a pick cannot be decoded; nothing is written
            RecordOperationFailedError: If the insert or update fails
            ImageUploadFailedError: If any image upload fails
        """
        entity_id = self.generate_entity_id()
        timestamp = utc_now_iso()

        item: Record = {
            **fields,
            "id": entity_id,
            records.owner_field: caller_id,
            "status": ENTITY_STATUS_ACTIVE,
            "is_deleted": False,
            "is_visible": True,
            "created_at": timestamp,
        }

        save = (
            self.uploads.plan_save(
                record=item,
                entity_id=entity_id,
                entity_type=entity_type,
                main_picks=picks[:1],
                additional_picks=picks[1:],
            )
            if picks
            else None
        )

        record = records.insert_record(item=item)
        logger.info(
            "Entity created",
            extra={"entity_id": entity_id, "entity_type": entity_type.value},
        )

        if save is None:
            return record

        self.uploads.execute(save, entity_id=entity_id)

        return records.update_record(
            entity_id=entity_id,
            owner_id=caller_id,
            changes=save.changes,
        )
