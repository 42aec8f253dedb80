"""Pydantic models for entity retrieval."""

from pydantic import BaseModel, Field

from core.utils.constants import DEFAULT_LIMIT, MAX_LIMIT, MIN_LIMIT


class ListOwnedRequest(BaseModel):
    limit: int = Field(DEFAULT_LIMIT, ge=MIN_LIMIT, le=MAX_LIMIT)
