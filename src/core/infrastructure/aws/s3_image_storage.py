"""S3-backed implementation of ObjectStorageRepository."""

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from core.infrastructure.adapters.s3_adapter import S3Adapter, S3AdapterProtocol
from core.models.errors import (
    DuplicateObjectError,
    ImageDeletionFailedError,
    ImageUploadFailedError,
    StorageError,
)
from core.repositories.storage_repository import ObjectStorageRepository
from core.utils.constants import (
    ERROR_CODE_STORAGE_LIST_FAILED,
    UPLOAD_CONTENT_TYPE,
)

logger = Logger(UTC=True)

_MISSING_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3ImageStorage(ObjectStorageRepository):
    """Object storage backed by S3 or an S3-compatible gateway."""

    def __init__(self, adapter: S3AdapterProtocol | None = None) -> None:
        """Create storage using the provided S3 adapter."""
        self._s3: S3AdapterProtocol = adapter or S3Adapter()

    def upload_object(
        self,
        *,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str = UPLOAD_CONTENT_TYPE,
        upsert: bool = True,
    ) -> str:
        """Upload bytes and return the object key."""
        logger.debug(
            "Uploading object",
            extra={"bucket": bucket, "key": key, "size": len(data), "upsert": upsert},
        )

        if not upsert and self.object_exists(bucket=bucket, key=key):
            raise DuplicateObjectError(
                message="An object already exists at this key",
                details={"bucket": bucket, "key": key},
            )

        try:
            self._s3.put_object(
                bucket=bucket,
                key=key,
                body=data,
                content_type=content_type,
            )
            logger.info("Object uploaded", extra={"bucket": bucket, "key": key})
            return key

        except ClientError as exc:
            logger.error(
                "S3 upload failed",
                extra={"bucket": bucket, "key": key, "code": _error_code(exc)},
            )
            raise ImageUploadFailedError(
                message="Unable to upload image at this time",
                details={"bucket": bucket, "key": key},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error uploading object")
            raise ImageUploadFailedError(
                message="Unable to upload image at this time",
                details={"bucket": bucket, "key": key},
            ) from exc

    def remove_object(self, *, bucket: str, key: str) -> None:
        """Delete an object from S3."""
        logger.debug("Deleting object", extra={"bucket": bucket, "key": key})

        try:
            self._s3.delete_object(bucket=bucket, key=key)
            logger.info("Object deleted", extra={"bucket": bucket, "key": key})

        except ClientError as exc:
            logger.error(
                "S3 deletion failed",
                extra={"bucket": bucket, "key": key, "code": _error_code(exc)},
            )
            raise ImageDeletionFailedError(
                message="Unable to delete image at this time",
                details={"bucket": bucket, "key": key},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error deleting object")
            raise ImageDeletionFailedError(
                message="Unable to delete image at this time",
                details={"bucket": bucket, "key": key},
            ) from exc

    def list_keys(self, *, bucket: str, prefix: str) -> list[str]:
        """List keys under a prefix."""
        try:
            keys = list(self._s3.iter_keys(bucket=bucket, prefix=prefix))
        except ClientError as exc:
            logger.error(
                "S3 listing failed",
                extra={"bucket": bucket, "prefix": prefix, "code": _error_code(exc)},
            )
            raise StorageError(
                message="Unable to list images at this time",
                error_code=ERROR_CODE_STORAGE_LIST_FAILED,
                details={"bucket": bucket, "prefix": prefix},
            ) from exc

        logger.debug(
            "Objects listed",
            extra={"bucket": bucket, "prefix": prefix, "count": len(keys)},
        )
        return keys

    def object_exists(self, *, bucket: str, key: str) -> bool:
        try:
            self._s3.head_object(bucket=bucket, key=key)
            return True
        except ClientError as exc:
            if _error_code(exc) in _MISSING_CODES:
                return False

            logger.error(
                "S3 head_object failed",
                extra={"bucket": bucket, "key": key, "code": _error_code(exc)},
            )
            raise StorageError(
                message="Unable to check image at this time",
                details={"bucket": bucket, "key": key},
            ) from exc
