"""Pydantic models for profile updates."""

from pydantic import BaseModel, ConfigDict, Field

from core.utils.constants import PHONE_NUMBER_PATTERN, USERNAME_MIN_LENGTH


class UpdateProfileRequest(BaseModel):
    """Partial profile update. Omitted fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: str | None = Field(None, min_length=USERNAME_MIN_LENGTH, max_length=30)
    dorm: str | None = Field(None, min_length=1, max_length=100)
    phone_number: str | None = Field(None, pattern=PHONE_NUMBER_PATTERN, max_length=20)
    allow_phone_contact: bool | None = None
    avatar: str | None = Field(None, description="Base64 encoded avatar image")

    def field_changes(self) -> dict[str, object]:
        return self.model_dump(exclude={"avatar"}, exclude_none=True)
