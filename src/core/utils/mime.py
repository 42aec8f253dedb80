from collections.abc import Mapping

from core.utils.constants import PASSTHROUGH_MIME_TYPES

MAGIC_BYTES: Mapping[bytes, str] = {
    b"\xff\xd8\xff": "image/jpeg",
    b"\x89PNG\r\n\x1a\n": "image/png",
    b"GIF87a": "image/gif",
    b"GIF89a": "image/gif",
}


def detect_mime_type(file_data: bytes) -> str | None:
    for signature, mime in MAGIC_BYTES.items():
        if file_data.startswith(signature):
            return mime

    # RIFF container: only WEBP is an image we accept
    if file_data[:4] == b"RIFF" and file_data[8:12] == b"WEBP":
        return "image/webp"

    return None


def is_passthrough(file_data: bytes) -> bool:
    """Whether the bytes must be uploaded without re-encoding."""
    return detect_mime_type(file_data) in PASSTHROUGH_MIME_TYPES
