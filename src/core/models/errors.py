"""Custom exception classes for the media service."""

from typing import Any

from core.utils.constants import (
    ERROR_CODE_FILE_SIZE_EXCEEDED,
    ERROR_CODE_FORBIDDEN,
    ERROR_CODE_IMAGE_DELETION_FAILED,
    ERROR_CODE_IMAGE_PROCESSING_FAILED,
    ERROR_CODE_IMAGE_UPLOAD_FAILED,
    ERROR_CODE_NETWORK_UNAVAILABLE,
    ERROR_CODE_OBJECT_ALREADY_EXISTS,
    ERROR_CODE_RECORD_OPERATION_FAILED,
    ERROR_CODE_RESOURCE_NOT_FOUND,
    ERROR_CODE_STORAGE,
    ERROR_CODE_USERNAME_TAKEN,
    ERROR_CODE_VALIDATION_FAILED,
)


class MediaServiceError(Exception):
    """
    Base exception for all media service errors.

    All custom errors must inherit from this class.
    Callers must explicitly provide a message and error code.
    Optional contextual information can be supplied via `details`.
    """

    message: str
    error_code: str
    details: dict[str, Any]

    def __init__(
        self,
        *,
        message: str,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        super().__init__(self.message)


class _DefaultCodeError(MediaServiceError):
    default_code: str = ERROR_CODE_VALIDATION_FAILED

    def __init__(
        self,
        *,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code or self.default_code,
            details=details,
        )


class ValidationError(_DefaultCodeError):
    """Raised when request validation fails before any network call."""

    default_code = ERROR_CODE_VALIDATION_FAILED


class NotFoundError(_DefaultCodeError):
    """Raised when a requested entity does not exist."""

    default_code = ERROR_CODE_RESOURCE_NOT_FOUND


class ForbiddenError(_DefaultCodeError):
    """Raised when the caller does not own the entity being written."""

    default_code = ERROR_CODE_FORBIDDEN


class StorageError(_DefaultCodeError):
    """Raised when an object storage operation fails."""

    default_code = ERROR_CODE_STORAGE


class ImageUploadFailedError(StorageError):
    """Raised when an object upload fails."""

    default_code = ERROR_CODE_IMAGE_UPLOAD_FAILED


class ImageDeletionFailedError(StorageError):
    """Raised when an object removal fails."""

    default_code = ERROR_CODE_IMAGE_DELETION_FAILED


class DuplicateObjectError(StorageError):
    """Raised when a non-upsert upload targets an existing key."""

    default_code = ERROR_CODE_OBJECT_ALREADY_EXISTS


class RecordOperationFailedError(_DefaultCodeError):
    """Raised when an entity record operation fails."""

    default_code = ERROR_CODE_RECORD_OPERATION_FAILED


class ImageProcessingError(_DefaultCodeError):
    """Raised when a picked image cannot be decoded or re-encoded."""

    default_code = ERROR_CODE_IMAGE_PROCESSING_FAILED


class FileSizeError(_DefaultCodeError):
    """Raised when file size exceeds the allowed limit."""

    default_code = ERROR_CODE_FILE_SIZE_EXCEEDED


class NetworkUnavailableError(_DefaultCodeError):
    """Raised when the pre-flight reachability probe fails."""

    default_code = ERROR_CODE_NETWORK_UNAVAILABLE


class UsernameTakenError(ValidationError):
    """Raised when a profile update picks a username owned by someone else."""

    default_code = ERROR_CODE_USERNAME_TAKEN
