"""Business logic for uploading images and associating them with an entity.

An upload batch is normalized, assigned its object keys up front and then
dispatched concurrently. Keys are fixed before dispatch, so completion
order never matters. A save is planned in full (`plan_save`) before its
first storage call, so a rejected image leaves storage untouched.
Persisting the keys is a separate step (`associate`) so that callers can
batch it with other field edits.
"""

import os
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from aws_lambda_powertools import Logger

from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.media.buckets import resolve_bucket
from core.media.normalizer import normalize_image
from core.media.paths import (
    decode_key,
    encode_additional_key,
    encode_main_key,
    normalize_reference,
)
from core.models.entity import (
    ADDITIONAL_IMAGES_FIELD,
    EntityType,
    UploadMode,
    main_image_field,
)
from core.models.errors import ValidationError
from core.models.pick import LocalPick
from core.models.result import Result, capture
from core.repositories.record_repository import EntityRecordRepository
from core.repositories.storage_repository import ObjectStorageRepository
from core.utils.constants import (
    DEFAULT_UPLOAD_MAX_WORKERS,
    ENV_UPLOAD_MAX_WORKERS,
    MAX_IMAGES_PER_ENTITY,
)
from core.utils.time import epoch_millis

Record = dict[str, Any]

logger = Logger(UTC=True)


@dataclass(frozen=True)
class PlannedUpload:
    """One normalized image with its final object key."""

    key: str
    data: bytes
    content_type: str


@dataclass(frozen=True)
class SavePlan:
    """Every upload of one save, checked and keyed before any storage call.

    `changes` holds the record fields the save writes once its uploads
    succeed. `previous_main` is only set when the save replaces the main
    image.
    """

    bucket: str
    uploads: list[PlannedUpload]
    changes: Record = field(default_factory=dict)
    replaces_main: bool = False
    previous_main: str | None = None


class UploadService:
    """Application service responsible for image uploads.

    This service orchestrates:
    - Image normalization
    - Object key assignment
    - Best-effort removal of the previous main image
    - Concurrent upserting uploads
    """

    def __init__(
        self,
        storage: ObjectStorageRepository | None = None,
        *,
        max_workers: int | None = None,
        clock: Callable[[], int] = epoch_millis,
    ) -> None:
        self.storage = storage or S3ImageStorage()
        self.max_workers = max_workers or int(
            os.getenv(ENV_UPLOAD_MAX_WORKERS, DEFAULT_UPLOAD_MAX_WORKERS)
        )
        self._clock = clock

    def plan(
        self,
        *,
        entity_id: str,
        picks: Sequence[LocalPick],
        mode: UploadMode,
        start_index: int = 0,
    ) -> list[PlannedUpload]:
        """Normalize picks and give each one its object key.

        Additional images share one millisecond disambiguator per batch and
        are told apart by their position in the entity's image list.

        Raises:
            ValidationError: If the batch is empty or replace-main gets more than one image
            ImageProcessingError: If a pick cannot be decoded
        """
        if not picks:
            raise ValidationError(message="At least one image is required")

        if mode is UploadMode.REPLACE_MAIN and len(picks) != 1:
            raise ValidationError(
                message="Exactly one image is required to replace the main image",
                details={"count": len(picks)},
            )

        normalized = [normalize_image(pick.data) for pick in picks]

        if mode is UploadMode.REPLACE_MAIN:
            image = normalized[0]
            return [
                PlannedUpload(
                    key=encode_main_key(entity_id, image.extension),
                    data=image.data,
                    content_type=image.content_type,
                )
            ]

        disambiguator = self._clock()
        return [
            PlannedUpload(
                key=encode_additional_key(
                    entity_id, disambiguator, start_index + offset, image.extension
                ),
                data=image.data,
                content_type=image.content_type,
            )
            for offset, image in enumerate(normalized)
        ]

    def plan_save(
        self,
        *,
        record: Record,
        entity_id: str,
        entity_type: EntityType,
        main_picks: Sequence[LocalPick] = (),
        additional_picks: Sequence[LocalPick] = (),
        kept_additional: list[str] | None = None,
    ) -> SavePlan:
        """Check and key every image of one save against `record`.

        Nothing touches storage here, so a rejected save leaves both the
        record and its objects as they were.

        Raises:
            ValidationError: If there is nothing to upload, the main batch is
                not a single image or the additional limit would be exceeded
            ImageProcessingError: If a pick cannot be decoded
        """
        if not main_picks and not additional_picks:
            raise ValidationError(message="At least one image is required")

        main_field = main_image_field(entity_type)
        uploads: list[PlannedUpload] = []
        changes: Record = {}
        existing: list[str] = []

        if additional_picks:
            existing = (
                kept_additional
                if kept_additional is not None
                else normalized_additional(record, entity_type)
            )
            if len(existing) + len(additional_picks) > MAX_IMAGES_PER_ENTITY:
                raise ValidationError(
                    message=f"An entity can hold at most {MAX_IMAGES_PER_ENTITY} additional images",
                    details={"existing": len(existing), "new": len(additional_picks)},
                )

        if main_picks:
            planned_main = self.plan(
                entity_id=entity_id, picks=main_picks, mode=UploadMode.REPLACE_MAIN
            )
            uploads.extend(planned_main)
            changes[main_field] = planned_main[0].key

        if additional_picks:
            planned_additional = self.plan(
                entity_id=entity_id,
                picks=additional_picks,
                mode=UploadMode.APPEND_ADDITIONAL,
                start_index=len(existing),
            )
            uploads.extend(planned_additional)
            changes[ADDITIONAL_IMAGES_FIELD] = existing + [item.key for item in planned_additional]

        return SavePlan(
            bucket=resolve_bucket(entity_type),
            uploads=uploads,
            changes=changes,
            replaces_main=bool(main_picks),
            previous_main=record.get(main_field) if main_picks else None,
        )

    def execute(self, save: SavePlan, *, entity_id: str) -> list[str]:
        """Run a planned save and return the uploaded keys, in plan order.

        The previous main is removed first; then every upload of the save is
        dispatched at once. If any upload fails, the first failure is raised
        once every upload has settled; objects that did upload are left in
        storage.

        Raises:
            ImageUploadFailedError: If any upload fails
        """
        logger.debug(
            "Starting image upload batch",
            extra={
                "entity_id": entity_id,
                "bucket": save.bucket,
                "replaces_main": save.replaces_main,
                "count": len(save.uploads),
            },
        )

        if save.replaces_main:
            self._remove_previous_main(save.bucket, save.previous_main)

        results = self._dispatch(save.bucket, save.uploads)

        failures = [result for result in results if not result.is_ok]
        if failures:
            uploaded = [result.value for result in results if result.is_ok]
            logger.error(
                "Image upload batch failed",
                extra={
                    "entity_id": entity_id,
                    "failed": len(failures),
                    "orphaned_keys": uploaded,
                },
            )
            failures[0].unwrap()

        keys = [result.unwrap() for result in results]
        logger.info(
            "Image upload batch completed",
            extra={"entity_id": entity_id, "keys": keys},
        )
        return keys

    def upload_images(
        self,
        *,
        entity_id: str,
        entity_type: EntityType,
        picks: Sequence[LocalPick],
        mode: UploadMode,
        previous_main: str | None = None,
        start_index: int = 0,
    ) -> list[str]:
        """Upload a single batch and return the object keys, in pick order.

        Nothing is persisted here.

        Raises:
            ValidationError: If the batch is malformed
            ImageProcessingError: If a pick cannot be decoded
            ImageUploadFailedError: If any upload fails
        """
        planned = self.plan(
            entity_id=entity_id,
            picks=picks,
            mode=mode,
            start_index=start_index,
        )
        save = SavePlan(
            bucket=resolve_bucket(entity_type),
            uploads=planned,
            replaces_main=mode is UploadMode.REPLACE_MAIN,
            previous_main=previous_main,
        )
        return self.execute(save, entity_id=entity_id)

    def associate(
        self,
        *,
        records: EntityRecordRepository,
        entity_id: str,
        entity_type: EntityType,
        caller_id: str,
        picks: Sequence[LocalPick],
        mode: UploadMode,
    ) -> Record:
        """Upload a batch and write the keys into the entity record.

        Raises:
            NotFoundError: If the entity does not exist
            ForbiddenError: If the caller does not own the entity
            ImageUploadFailedError: If any upload fails
        """
        record = records.fetch_owned(entity_id=entity_id, owner_id=caller_id)
        changes = self.upload_changes(
            record=record,
            entity_id=entity_id,
            entity_type=entity_type,
            picks=picks,
            mode=mode,
        )
        return records.update_record(
            entity_id=entity_id,
            owner_id=caller_id,
            changes=changes,
        )

    def upload_changes(
        self,
        *,
        record: Record,
        entity_id: str,
        entity_type: EntityType,
        picks: Sequence[LocalPick],
        mode: UploadMode,
    ) -> Record:
        """Upload one batch against `record` and return the record changes."""
        replace = mode is UploadMode.REPLACE_MAIN
        save = self.plan_save(
            record=record,
            entity_id=entity_id,
            entity_type=entity_type,
            main_picks=picks if replace else (),
            additional_picks=() if replace else picks,
        )
        self.execute(save, entity_id=entity_id)
        return save.changes

    def _remove_previous_main(self, bucket: str, previous_main: str | None) -> None:
        key = decode_key(previous_main, bucket)
        if key is None:
            return

        result = capture(self.storage.remove_object, bucket=bucket, key=key)
        if not result.is_ok:
            logger.warning(
                "Could not remove previous main image, overwriting instead",
                extra={"bucket": bucket, "key": key, "error": str(result.error)},
            )

    def _dispatch(self, bucket: str, planned: list[PlannedUpload]) -> list[Result[str]]:
        def upload(item: PlannedUpload) -> Result[str]:
            return capture(
                self.storage.upload_object,
                bucket=bucket,
                key=item.key,
                data=item.data,
                content_type=item.content_type,
                upsert=True,
            )

        if len(planned) == 1:
            return [upload(planned[0])]

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(planned))) as pool:
            return list(pool.map(upload, planned))


def normalized_additional(record: Record, entity_type: EntityType) -> list[str]:
    """The record's additional references in their persisted key form."""
    references = record.get(ADDITIONAL_IMAGES_FIELD) or []
    return [
        normalized
        for normalized in (normalize_reference(ref, entity_type) for ref in references)
        if normalized
    ]
