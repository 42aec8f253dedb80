"""Pydantic models for entity creation requests."""

from pydantic import BaseModel, ConfigDict, Field

from core.models.entity import EntityType
from core.utils.constants import MAX_IMAGES_PER_ENTITY


class CreateBuyOrderRequest(BaseModel):
    """Fields of a want-to-buy order."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    dorm: str = Field(..., min_length=1, max_length=100)
    files: list[str] = Field(
        default_factory=list,
        max_length=MAX_IMAGES_PER_ENTITY + 1,
        description="Base64 images; the first becomes the main image",
    )


class CreateListingRequest(CreateBuyOrderRequest):
    """Fields of a sale listing."""

    price: float = Field(..., gt=0, description="Asking price")


REQUEST_MODELS: dict[EntityType, type[CreateBuyOrderRequest]] = {
    EntityType.SALE: CreateListingRequest,
    EntityType.WANT_TO_BUY: CreateBuyOrderRequest,
}
