"""Resize and re-encode picked images before upload."""

import io
from dataclasses import dataclass

from aws_lambda_powertools import Logger
from PIL import Image, ImageOps, UnidentifiedImageError

from core.models.errors import FileSizeError, ImageProcessingError
from core.utils.constants import (
    MAX_FILE_SIZE,
    MIME_TYPE_EXTENSION_MAP,
    NORMALIZED_JPEG_QUALITY,
    NORMALIZED_MAX_HEIGHT,
    NORMALIZED_MAX_WIDTH,
    UPLOAD_CONTENT_TYPE,
    get_max_file_size_mb,
)
from core.utils.mime import detect_mime_type, is_passthrough

logger = Logger(UTC=True)


@dataclass(frozen=True)
class NormalizedImage:
    data: bytes
    content_type: str
    extension: str
    passthrough: bool = False


def _is_animated(image: Image.Image) -> bool:
    return bool(getattr(image, "is_animated", False)) and getattr(image, "n_frames", 1) > 1


def normalize_image(
    file_data: bytes,
    *,
    max_width: int = NORMALIZED_MAX_WIDTH,
    max_height: int = NORMALIZED_MAX_HEIGHT,
    quality: int = NORMALIZED_JPEG_QUALITY,
) -> NormalizedImage:
    """Fit an image inside max_width x max_height and encode it as JPEG.

    GIFs and other animated images are returned untouched. Images are
    only ever downscaled.

    Raises:
        FileSizeError: If the input is larger than MAX_FILE_SIZE
        ImageProcessingError: If the bytes are not a decodable image
    """
    if len(file_data) > MAX_FILE_SIZE:
        raise FileSizeError(
            message=f"File size exceeds {get_max_file_size_mb()}MB limit",
            details={"size": len(file_data)},
        )

    if is_passthrough(file_data):
        mime_type = detect_mime_type(file_data) or UPLOAD_CONTENT_TYPE
        logger.debug("Passing image through unmodified", extra={"mime_type": mime_type})
        return NormalizedImage(
            data=file_data,
            content_type=mime_type,
            extension=MIME_TYPE_EXTENSION_MAP.get(mime_type, "bin"),
            passthrough=True,
        )

    try:
        with Image.open(io.BytesIO(file_data)) as image:
            if _is_animated(image):
                mime_type = Image.MIME.get(image.format or "", UPLOAD_CONTENT_TYPE)
                return NormalizedImage(
                    data=file_data,
                    content_type=mime_type,
                    extension=MIME_TYPE_EXTENSION_MAP.get(mime_type, "bin"),
                    passthrough=True,
                )

            original_size = image.size
            converted = ImageOps.exif_transpose(image).convert("RGB")
            converted.thumbnail((max_width, max_height), Image.Resampling.LANCZOS)

            buffer = io.BytesIO()
            converted.save(buffer, format="JPEG", quality=quality, optimize=True)

    except (UnidentifiedImageError, OSError, ValueError) as exc:
        logger.warning("Image could not be decoded", extra={"size": len(file_data)})
        raise ImageProcessingError(
            message="Image could not be processed",
            details={"size": len(file_data)},
        ) from exc

    logger.debug(
        "Image normalized",
        extra={
            "original_size": original_size,
            "normalized_size": converted.size,
            "bytes": buffer.tell(),
        },
    )

    return NormalizedImage(
        data=buffer.getvalue(),
        content_type=UPLOAD_CONTENT_TYPE,
        extension=MIME_TYPE_EXTENSION_MAP[UPLOAD_CONTENT_TYPE],
    )
