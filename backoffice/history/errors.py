"""Revert errors.

Both carry a fixed message so API clients can match on it.
"""

from backoffice.db.errors import NotFoundError, ValidationError


class VersionNotFoundError(NotFoundError):
    """The requested history entry does not exist."""

    def __init__(self, history_id: int) -> None:
        super().__init__("Version not found")
        self.history_id = history_id


class NoDataToRestoreError(ValidationError):
    """The history entry carries neither an old nor a new row snapshot.

    Stored entries cannot be in that state: HistoryRecord rejects it and the
    ``chk_data_history_has_data`` constraint forbids it in Postgres. The check
    in RevertEngine covers history stores that build records without
    validation.
    """

    def __init__(self, history_id: int) -> None:
        super().__init__("No data available to restore")
        self.history_id = history_id
