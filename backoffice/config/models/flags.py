"""Feature flag client configuration models."""

from pydantic import BaseModel, Field


class FeatureFlagsConfig(BaseModel):
    """Feature flag fetch and cache configuration."""

    base_url: str = Field(
        default="http://localhost:8000/v1",
        description="Base URL serving GET /settings",
    )
    cache_ttl_seconds: float = Field(
        default=60.0,
        ge=0,
        description="How long fetched flags are served without refetching",
    )
    stale_ttl_seconds: float = Field(
        default=24 * 60 * 60,
        ge=0,
        description="Maximum age of stored flags used when a fetch fails",
    )
    timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        le=10.0,
        description="HTTP timeout for the settings fetch",
    )
    storage_path: str | None = Field(
        default=None,
        description="JSON file for the stale flag copy (in-memory when unset)",
    )
