"""Abstract contract for image object storage."""

from abc import ABC, abstractmethod

from aws_lambda_powertools import Logger

from core.models.result import capture
from core.utils.constants import UPLOAD_CONTENT_TYPE

logger = Logger(UTC=True)


class ObjectStorageRepository(ABC):
    """Contract for storing and removing image objects in named buckets.

    Implementations could be S3, an S3-compatible gateway, GCS, local disk, etc.
    Workflows depend on this interface, not the implementation.
    """

    @abstractmethod
    def upload_object(
        self,
        *,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str = UPLOAD_CONTENT_TYPE,
        upsert: bool = True,
    ) -> str:
        """Upload bytes to `bucket` under `key` and return the key.

        Raises:
            DuplicateObjectError: If upsert is False and the key exists
            ImageUploadFailedError: If the upload fails
        """

    @abstractmethod
    def remove_object(self, *, bucket: str, key: str) -> None:
        """Delete one object.

        Raises:
            ImageDeletionFailedError: If deletion fails
        """

    @abstractmethod
    def list_keys(self, *, bucket: str, prefix: str) -> list[str]:
        """List every key under `prefix`.

        Raises:
            StorageError: If listing fails
        """

    @abstractmethod
    def object_exists(self, *, bucket: str, key: str) -> bool:
        """Whether an object exists.

        Raises:
            StorageError: If the lookup fails for any reason other than absence
        """

    def remove_prefix(self, *, bucket: str, prefix: str) -> list[str]:
        """Delete every object under `prefix` and return the removed keys.

        Removal is best effort per object: a key that cannot be removed is
        logged and skipped.

        Raises:
            StorageError: If listing fails
        """
        removed: list[str] = []

        for key in self.list_keys(bucket=bucket, prefix=prefix):
            result = capture(self.remove_object, bucket=bucket, key=key)
            if result.is_ok:
                removed.append(key)
            else:
                logger.warning(
                    "Failed to remove object under prefix",
                    extra={"bucket": bucket, "key": key, "error": str(result.error)},
                )

        return removed
