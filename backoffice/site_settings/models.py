"""Setting domain models."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

SETTINGS_TABLE = "settings"


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class DataType(str, Enum):
    """How a setting's raw string value is interpreted."""

    STRING = "string"
    BOOLEAN = "boolean"
    NUMBER = "number"
    JSON = "json"
    ARRAY = "array"


class SettingCategory(str, Enum):
    """Well-known setting categories.

    The column is free text; these are the groups the admin console renders.
    """

    GENERAL = "general"
    SECURITY = "security"
    THEME = "theme"
    FEATURES = "features"
    EMAIL = "email"
    INTEGRATIONS = "integrations"
    ADVANCED = "advanced"


class SettingEntry(BaseModel):
    """One row of the key/value settings table."""

    id: int | None = Field(default=None, description="Row identifier")
    key: str = Field(..., min_length=1, max_length=100, description="Unique setting name")
    value: str = Field(default="", description="Raw stored value")
    category: str = Field(default=SettingCategory.GENERAL.value, description="Display group")
    data_type: DataType = Field(default=DataType.STRING, description="Value interpretation")
    description: str | None = Field(default=None, description="Human-readable description")
    updated_at: datetime = Field(default_factory=utc_now, description="Last write time")
    updated_by: str | None = Field(default=None, description="User who last wrote the value")


class SettingsSnapshot(BaseModel):
    """Flat typed view over a set of settings rows."""

    values: dict[str, Any] = Field(default_factory=dict)
    last_updated: datetime | None = None
    cache_hit: bool = False


class SettingsUpdateResult(BaseModel):
    """Outcome of a partial settings write."""

    updated: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
