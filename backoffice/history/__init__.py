"""Data change history: capture, query and revert of row-level changes."""

from backoffice.history.diff import compare_versions, compute_changed_fields
from backoffice.history.errors import NoDataToRestoreError, VersionNotFoundError
from backoffice.history.gateway import RecordGateway
from backoffice.history.models import (
    BulkRevertResult,
    FieldDifference,
    HistoryAction,
    HistoryFilter,
    HistoryPage,
    HistoryRecord,
    HistoryStats,
    TrackingResult,
    VersionComparison,
)
from backoffice.history.recorder import ChangeRecorder
from backoffice.history.revert import RevertEngine
from backoffice.history.store import HistoryStore

__all__ = [
    "BulkRevertResult",
    "ChangeRecorder",
    "FieldDifference",
    "HistoryAction",
    "HistoryFilter",
    "HistoryPage",
    "HistoryRecord",
    "HistoryStats",
    "HistoryStore",
    "NoDataToRestoreError",
    "RecordGateway",
    "RevertEngine",
    "TrackingResult",
    "VersionComparison",
    "VersionNotFoundError",
    "compare_versions",
    "compute_changed_fields",
]
