"""Business logic for profile edits, including the avatar."""

from typing import Any

from aws_lambda_powertools import Logger

from core.models.entity import EntityType, UploadMode
from core.models.errors import UsernameTakenError, ValidationError
from core.models.pick import LocalPick
from core.repositories.record_repository import EntityRecordRepository
from core.utils.constants import USERNAME_INDEX_NAME
from handlers.upload_entity_image.service import UploadService

Record = dict[str, Any]

logger = Logger(UTC=True)


class ProfileService:
    """Application service behind the profile screen.

    A profile row is keyed by the user's id, so the caller always owns the
    row it edits. The avatar follows the replace-main rules on the avatars
    bucket.
    """

    def __init__(self, uploads: UploadService | None = None) -> None:
        self.uploads = uploads or UploadService()

    def update_profile(
        self,
        *,
        records: EntityRecordRepository,
        caller_id: str,
        fields: Record,
        avatar: LocalPick | None = None,
    ) -> Record:
        """Apply profile edits and return the updated profile.

        Raises:
            ValidationError: If the update changes nothing
            UsernameTakenError: If another user already has the username
            NotFoundError: If the caller has no profile row
            ImageUploadFailedError: If the avatar upload fails
        """
        if not fields and avatar is None:
            raise ValidationError(message="Nothing to update")

        username = fields.get("username")
        if username:
            self.ensure_username_available(records, username=username, caller_id=caller_id)

        record = records.fetch_owned(entity_id=caller_id, owner_id=caller_id)
        changes: Record = dict(fields)

        if avatar is not None:
            changes.update(
                self.uploads.upload_changes(
                    record=record,
                    entity_id=caller_id,
                    entity_type=EntityType.AVATAR,
                    picks=[avatar],
                    mode=UploadMode.REPLACE_MAIN,
                )
            )

        updated = records.update_record(
            entity_id=caller_id,
            owner_id=caller_id,
            changes=changes,
        )
        logger.info(
            "Profile updated",
            extra={"user_id": caller_id, "fields": sorted(changes)},
        )
        return updated

    @staticmethod
    def ensure_username_available(
        records: EntityRecordRepository,
        *,
        username: str,
        caller_id: str,
    ) -> None:
        matches = records.find_by_field(
            index_name=USERNAME_INDEX_NAME,
            field="username",
            value=username,
        )

        if any(match.get("id") != caller_id for match in matches):
            logger.info("Username already taken", extra={"user_id": caller_id})
            raise UsernameTakenError(
                message="This username is already taken",
                details={"field": "username"},
            )
