"""Settings endpoint models."""

from pydantic import BaseModel, Field


class SettingsUpdateResponse(BaseModel):
    """Response for PUT /settings."""

    message: str = "Settings updated successfully"
    updated: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
