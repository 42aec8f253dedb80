"""Pydantic models for entity edit requests."""

from pydantic import BaseModel, ConfigDict, Field

from core.utils.constants import MAX_IMAGES_PER_ENTITY


class EditEntityRequest(BaseModel):
    """Partial update of a listing or buy-order.

    Omitted fields are left unchanged. `remove_additional` takes asset
    references exactly as the client received them (keys or URLs).
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=2000)
    dorm: str | None = Field(None, min_length=1, max_length=100)
    price: float | None = Field(None, gt=0)
    main_file: str | None = Field(None, description="Base64 replacement main image")
    files: list[str] = Field(
        default_factory=list,
        max_length=MAX_IMAGES_PER_ENTITY,
        description="Base64 images to append",
    )
    remove_additional: list[str] = Field(default_factory=list)

    def field_changes(self) -> dict[str, object]:
        return self.model_dump(
            exclude={"main_file", "files", "remove_additional"},
            exclude_none=True,
        )
