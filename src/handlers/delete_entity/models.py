"""Pydantic models for delete entity response."""

from pydantic import BaseModel, Field


class DeleteEntityResponse(BaseModel):
    """Response model for successful entity deletion."""

    entity_id: str = Field(..., description="Deleted entity ID")
    message: str = Field(..., description="Success message")
    deleted_at: str = Field(..., description="Deletion timestamp")
    removed_keys: list[str] = Field(..., description="Object keys that were removed")
    failed_keys: list[str] = Field(..., description="Object keys that could not be removed")
