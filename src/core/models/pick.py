"""Local picks: transient handles to images chosen on the device."""

import base64
import binascii
from dataclasses import dataclass
from pathlib import Path

from core.models.errors import FileSizeError, ValidationError
from core.utils.constants import MAX_FILE_SIZE, format_file_size, get_max_file_size_mb


@dataclass(frozen=True)
class LocalPick:
    """Picked image bytes that have not been uploaded yet.

    A pick is never persisted; once its upload succeeds the caller drops it.
    """

    data: bytes
    filename: str | None = None

    def __post_init__(self) -> None:
        if not self.data:
            raise ValidationError(
                message="Picked image is empty",
                details={"filename": self.filename},
            )

        if len(self.data) > MAX_FILE_SIZE:
            raise FileSizeError(
                message=(
                    f"File size {format_file_size(len(self.data))} exceeds "
                    f"{get_max_file_size_mb()}MB limit"
                ),
                details={"filename": self.filename, "size": len(self.data)},
            )

    @classmethod
    def from_path(cls, path: str | Path) -> "LocalPick":
        """Read a picked image from the local filesystem."""
        file_path = Path(path)

        if not file_path.is_file():
            raise ValidationError(
                message="Image file not found",
                details={"path": str(file_path)},
            )

        return cls(data=file_path.read_bytes(), filename=file_path.name)

    @classmethod
    def from_base64(cls, encoded: str, filename: str | None = None) -> "LocalPick":
        """Decode a base64 payload (optionally a data URL) into a pick."""
        payload = encoded.split(",", 1)[1] if encoded.startswith("data:") else encoded

        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError(
                message="Invalid base64 encoded file",
                details={"encoding": "base64", "filename": filename},
            ) from exc

        return cls(data=data, filename=filename)
