"""Data history domain models."""

from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class HistoryAction(str, Enum):
    """Kind of row mutation captured by a history record."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class HistoryRecord(BaseModel):
    """Immutable snapshot of a row before and after one mutation."""

    model_config = ConfigDict(frozen=True)

    id: int | None = Field(default=None, description="History entry identifier")
    table_name: str = Field(..., min_length=1, description="Tracked table")
    record_id: str = Field(..., description="Primary key of the mutated row, as text")
    action: HistoryAction
    old_data: dict[str, Any] | None = Field(default=None, description="Row before the change")
    new_data: dict[str, Any] | None = Field(default=None, description="Row after the change")
    changed_fields: list[str] = Field(default_factory=list)
    changed_by: str | None = None
    changed_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def _has_data(self) -> "HistoryRecord":
        if self.old_data is None and self.new_data is None:
            raise ValueError("old_data and new_data cannot both be empty")
        return self


class FieldDifference(BaseModel):
    """One differing field between two row versions."""

    field: str
    old_value: Any = None
    new_value: Any = None


class HistoryFilter(BaseModel):
    """Filters for listing history entries. All criteria are combined with AND."""

    table_name: str | None = None
    record_id: str | None = None
    action: HistoryAction | None = None
    changed_by: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    limit: int = Field(default=50, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)


class HistoryPage(BaseModel):
    """A page of history entries, newest first, with the unpaged total."""

    items: list[HistoryRecord] = Field(default_factory=list)
    total: int = 0
    limit: int = 50
    offset: int = 0


class TimelineEntry(BaseModel):
    """Condensed history entry for the change timeline of a record."""

    id: int
    action: HistoryAction
    changed_fields: list[str] = Field(default_factory=list)
    changed_by: str | None = None
    changed_at: datetime


class ActionSummary(BaseModel):
    """Per-action change summary for one record."""

    action: HistoryAction
    count: int
    first_change: datetime
    last_change: datetime
    users: list[str] = Field(default_factory=list)


class TableActionStats(BaseModel):
    table_name: str
    action: HistoryAction
    count: int
    unique_records: int
    unique_users: int


class DailyTrend(BaseModel):
    day: date
    count: int


class HistoryStats(BaseModel):
    """Change volume over a trailing window of days."""

    days: int
    table_name: str | None = None
    by_table: list[TableActionStats] = Field(default_factory=list)
    daily: list[DailyTrend] = Field(default_factory=list)


class TrackingResult(BaseModel):
    """Outcome of enabling or disabling tracking on a table.

    ``changed`` is False when the table was already in the requested state.
    """

    table_name: str
    tracked: bool
    changed: bool
    message: str


class RevertSuccess(BaseModel):
    history_id: int
    record: dict[str, Any]


class RevertFailure(BaseModel):
    history_id: int
    error: str


class BulkRevertResult(BaseModel):
    """Per-entry outcome of a bulk revert; failures never abort the batch."""

    success: list[RevertSuccess] = Field(default_factory=list)
    failed: list[RevertFailure] = Field(default_factory=list)


class VersionComparison(BaseModel):
    """Two history entries and the fields that differ between their restorable states."""

    version1: HistoryRecord
    version2: HistoryRecord
    differences: list[FieldDifference] = Field(default_factory=list)
