"""Pydantic models for entity image upload request/response."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.models.entity import UploadMode
from core.utils.constants import MAX_IMAGES_PER_ENTITY


class UploadImagesRequest(BaseModel):
    """Validation model for an image upload batch."""

    model_config = ConfigDict(str_strip_whitespace=True)

    files: list[str] = Field(
        ...,
        min_length=1,
        max_length=MAX_IMAGES_PER_ENTITY,
        description="Base64 encoded image files",
    )
    mode: UploadMode = Field(
        UploadMode.APPEND_ADDITIONAL,
        description="replace-main or append-additional",
    )

    @model_validator(mode="after")
    def check_replace_main_count(self) -> "UploadImagesRequest":
        if self.mode is UploadMode.REPLACE_MAIN and len(self.files) != 1:
            raise ValueError("replace-main takes exactly one file")
        return self


class UploadImagesResponse(BaseModel):
    """Response model for a successful upload batch."""

    entity_id: str = Field(..., description="Entity the images belong to")
    mode: UploadMode = Field(..., description="Upload mode that was applied")
    main_image_display_url: str | None = Field(None, description="Displayable main image URL")
    additional_image_urls: list[str] = Field(default_factory=list)
    message: str = Field(..., description="Success message")
