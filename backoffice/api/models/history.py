"""Data history endpoint models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BulkRevertRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    history_ids: list[int] = Field(..., min_length=1, max_length=500, alias="historyIds")


class TrackingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    table_name: str = Field(..., min_length=1, max_length=63, alias="tableName")


class RestoreResponse(BaseModel):
    message: str = "Record restored"
    history_id: int
    record: dict[str, Any]
