"""Global constants used throughout the application.

This module centralizes all magic numbers, string literals, and configuration
values that are used across multiple modules. Using constants prevents hardcoding
values and makes it easy to change them globally.
"""

from typing import Final

# ============================================================================
# Error Codes
# ============================================================================


# Validation Errors
ERROR_CODE_VALIDATION_FAILED = "VALIDATION_FAILED"
ERROR_CODE_FILE_SIZE_EXCEEDED = "FILE_SIZE_EXCEEDED"
ERROR_CODE_IMAGE_PROCESSING_FAILED = "IMAGE_PROCESSING_FAILED"
ERROR_CODE_USERNAME_TAKEN = "USERNAME_TAKEN"

# Access Errors
ERROR_CODE_RESOURCE_NOT_FOUND = "NOT_FOUND"
ERROR_CODE_FORBIDDEN = "FORBIDDEN"

# Storage Errors
ERROR_CODE_STORAGE = "STORAGE_ERROR"
ERROR_CODE_IMAGE_UPLOAD_FAILED = "IMAGE_UPLOAD_FAILED"
ERROR_CODE_IMAGE_DELETION_FAILED = "IMAGE_DELETION_FAILED"
ERROR_CODE_OBJECT_ALREADY_EXISTS = "OBJECT_ALREADY_EXISTS"
ERROR_CODE_STORAGE_LIST_FAILED = "STORAGE_LIST_FAILED"

# Record / DynamoDB Errors
ERROR_CODE_RECORD_OPERATION_FAILED = "RECORD_OPERATION_FAILED"
ERROR_CODE_RECORD_CREATE_FAILED = "RECORD_CREATE_FAILED"
ERROR_CODE_RECORD_FETCH_FAILED = "RECORD_FETCH_FAILED"
ERROR_CODE_RECORD_UPDATE_FAILED = "RECORD_UPDATE_FAILED"
ERROR_CODE_RECORD_DELETE_FAILED = "RECORD_DELETE_FAILED"
ERROR_CODE_RECORD_LIST_FAILED = "RECORD_LIST_FAILED"

# Connectivity
ERROR_CODE_NETWORK_UNAVAILABLE = "NETWORK_UNAVAILABLE"


# ============================================================================
# Storage Buckets
# ============================================================================

BUCKET_LISTING_IMAGES = "product_images"
BUCKET_BUY_ORDER_IMAGES = "buy-orders-images"
BUCKET_AVATARS = "avatars"
DEFAULT_BUCKET = BUCKET_LISTING_IMAGES

PUBLIC_OBJECT_PATH = "/storage/v1/object/public"

MAIN_IMAGE_STEM = "main"
DEFAULT_IMAGE_EXTENSION = "jpg"
UPLOAD_CONTENT_TYPE = "image/jpeg"
UPLOAD_CACHE_CONTROL = "max-age=3600"

# ============================================================================
# Image Normalization
# ============================================================================

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB in bytes

NORMALIZED_MAX_WIDTH = 1200
NORMALIZED_MAX_HEIGHT = 1200
NORMALIZED_JPEG_QUALITY = 80

MIME_TYPE_EXTENSION_MAP: Final[dict[str, str]] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}

# Formats uploaded byte-for-byte instead of being re-encoded.
PASSTHROUGH_MIME_TYPES: Final[frozenset[str]] = frozenset({"image/gif"})

MAX_IMAGES_PER_ENTITY = 10

# ============================================================================
# Entity Records
# ============================================================================

OWNER_INDEX_NAME = "owner-created-index"
USERNAME_INDEX_NAME = "username-index"

ENTITY_STATUS_ACTIVE = "active"

DEFAULT_LIMIT = 20
MIN_LIMIT = 1
MAX_LIMIT = 100

USERNAME_MIN_LENGTH = 3
PHONE_NUMBER_PATTERN = r"^\+?[\d\s-]+$"

# ============================================================================
# Operational Defaults
# ============================================================================

DEFAULT_PROBE_TIMEOUT_SECONDS = 5.0
DEFAULT_SLOW_OPERATION_SECONDS = 15.0
DEFAULT_UPLOAD_MAX_WORKERS = 4

# ============================================================================
# API Gateway Configuration
# ============================================================================

CORS_ORIGIN = "*"
CORS_METHODS = "GET,POST,PATCH,DELETE,OPTIONS"
CORS_HEADERS = "Content-Type,Authorization,X-Api-Key"
DEFAULT_CONTENT_TYPE = "application/json"

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."

# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"
ENV_AWS_REGION = "AWS_REGION"
ENV_STORAGE_PUBLIC_BASE_URL = "STORAGE_PUBLIC_BASE_URL"
ENV_LISTINGS_TABLE_NAME = "LISTINGS_TABLE_NAME"
ENV_BUY_ORDERS_TABLE_NAME = "BUY_ORDERS_TABLE_NAME"
ENV_PROFILES_TABLE_NAME = "PROFILES_TABLE_NAME"
ENV_CONNECTIVITY_PROBE_URL = "CONNECTIVITY_PROBE_URL"
ENV_CONNECTIVITY_PROBE_TIMEOUT = "CONNECTIVITY_PROBE_TIMEOUT"
ENV_SLOW_OPERATION_SECONDS = "SLOW_OPERATION_SECONDS"
ENV_UPLOAD_MAX_WORKERS = "UPLOAD_MAX_WORKERS"

# ============================================================================
# Helper Functions
# ============================================================================


def get_max_file_size_mb() -> int:
    """Get maximum file size in megabytes."""
    return MAX_FILE_SIZE // (1024 * 1024)


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted file size string
    """
    size: float = float(size_bytes)

    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0

    return f"{size:.1f} TB"
