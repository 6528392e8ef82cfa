"""API server configuration models."""

from pydantic import BaseModel, Field, field_validator


class AuthConfig(BaseModel):
    """Bearer token verification settings.

    The signing secret itself is read from BACKOFFICE_JWT_SECRET so it never
    lives in a TOML file.
    """

    algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    safe_read_keys: list[str] = Field(
        default=["siteTitle"],
        description="Setting keys any authenticated user may read",
    )


class APIConfig(BaseModel):
    """Configuration for the HTTP API server."""

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, ge=1, le=65535, description="Port number")
    workers: int = Field(default=2, ge=1, description="Number of worker processes")
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Allow credentials in CORS",
    )
    auth: AuthConfig = Field(
        default_factory=AuthConfig,
        description="Authentication settings",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v
