"""Audit log configuration models."""

from pydantic import BaseModel, Field


class AuditConfig(BaseModel):
    """Audit log writer configuration."""

    max_entries: int = Field(
        default=1000,
        gt=0,
        description="Capacity of the in-memory audit ring buffer",
    )
    default_query_limit: int = Field(
        default=100,
        gt=0,
        description="Rows returned by GET /audit-logs without pagination",
    )
    default_page_size: int = Field(
        default=25,
        gt=0,
        description="Page size when page/limit pagination is requested",
    )
