"""In-memory implementations of HistoryStore and RecordGateway."""

import copy
from collections import Counter, defaultdict
from datetime import timedelta
from typing import Any

from backoffice.db.errors import NotFoundError, validate_identifier
from backoffice.history.gateway import RecordGateway
from backoffice.history.models import (
    ActionSummary,
    DailyTrend,
    HistoryAction,
    HistoryFilter,
    HistoryPage,
    HistoryRecord,
    HistoryStats,
    TableActionStats,
    TimelineEntry,
    TrackingResult,
    utc_now,
)
from backoffice.history.recorder import ChangeRecorder
from backoffice.history.store import HistoryStore


class InMemoryHistoryStore(HistoryStore):
    """In-memory implementation of HistoryStore for testing and development.

    Uses a list with linear scans for queries.
    """

    def __init__(self) -> None:
        self._records: list[HistoryRecord] = []
        self._next_id = 1

    async def save(self, record: HistoryRecord) -> HistoryRecord:
        stored = record.model_copy(update={"id": self._next_id})
        self._next_id += 1
        self._records.append(stored)
        return stored

    async def get(self, history_id: int) -> HistoryRecord | None:
        for record in self._records:
            if record.id == history_id:
                return record
        return None

    async def list_history(self, filter: HistoryFilter) -> HistoryPage:
        results = []
        for record in self._records:
            if filter.table_name is not None and record.table_name != filter.table_name:
                continue
            if filter.record_id is not None and record.record_id != filter.record_id:
                continue
            if filter.action is not None and record.action != filter.action:
                continue
            if filter.changed_by is not None and record.changed_by != filter.changed_by:
                continue
            if filter.start_date is not None and record.changed_at < filter.start_date:
                continue
            if filter.end_date is not None and record.changed_at > filter.end_date:
                continue
            results.append(record)

        results.sort(key=lambda r: (r.changed_at, r.id), reverse=True)
        return HistoryPage(
            items=results[filter.offset:filter.offset + filter.limit],
            total=len(results),
            limit=filter.limit,
            offset=filter.offset,
        )

    async def get_record_history(
        self,
        table_name: str,
        record_id: str,
        *,
        limit: int = 50,
    ) -> list[HistoryRecord]:
        page = await self.list_history(
            HistoryFilter(table_name=table_name, record_id=record_id, limit=limit)
        )
        return page.items

    async def get_change_timeline(
        self,
        table_name: str,
        record_id: str,
    ) -> list[TimelineEntry]:
        records = self._for_record(table_name, record_id)
        return [
            TimelineEntry(
                id=r.id,
                action=r.action,
                changed_fields=r.changed_fields,
                changed_by=r.changed_by,
                changed_at=r.changed_at,
            )
            for r in records
        ]

    async def get_record_change_summary(
        self,
        table_name: str,
        record_id: str,
    ) -> list[ActionSummary]:
        grouped: dict[HistoryAction, list[HistoryRecord]] = defaultdict(list)
        for record in self._for_record(table_name, record_id):
            grouped[record.action].append(record)

        summaries = []
        for action, records in grouped.items():
            users = sorted({r.changed_by for r in records if r.changed_by})
            summaries.append(
                ActionSummary(
                    action=action,
                    count=len(records),
                    first_change=records[0].changed_at,
                    last_change=records[-1].changed_at,
                    users=users,
                )
            )
        summaries.sort(key=lambda s: s.action.value)
        return summaries

    async def get_latest_version(
        self,
        table_name: str,
        record_id: str,
    ) -> HistoryRecord | None:
        records = self._for_record(table_name, record_id)
        return records[-1] if records else None

    async def get_stats(self, days: int = 30, table_name: str | None = None) -> HistoryStats:
        since = utc_now() - timedelta(days=days)
        window = [
            r for r in self._records
            if r.changed_at >= since and (table_name is None or r.table_name == table_name)
        ]

        groups: dict[tuple[str, HistoryAction], list[HistoryRecord]] = defaultdict(list)
        for record in window:
            groups[(record.table_name, record.action)].append(record)

        by_table = [
            TableActionStats(
                table_name=table,
                action=action,
                count=len(records),
                unique_records=len({r.record_id for r in records}),
                unique_users=len({r.changed_by for r in records if r.changed_by}),
            )
            for (table, action), records in groups.items()
        ]
        by_table.sort(key=lambda s: s.count, reverse=True)

        per_day = Counter(r.changed_at.date() for r in window)
        daily = [DailyTrend(day=day, count=count) for day, count in sorted(per_day.items(), reverse=True)]

        return HistoryStats(days=days, table_name=table_name, by_table=by_table, daily=daily)

    def _for_record(self, table_name: str, record_id: str) -> list[HistoryRecord]:
        """Chronological history of one row."""
        records = [
            r for r in self._records
            if r.table_name == table_name and r.record_id == str(record_id)
        ]
        records.sort(key=lambda r: (r.changed_at, r.id))
        return records


class InMemoryRecordGateway(RecordGateway):
    """Dict-backed tables with trigger-style change recording.

    Rows are plain JSON-compatible dicts keyed by ``str(row["id"])``. Every
    mutation of a tracked table is passed to the recorder, the way the
    track_data_changes() trigger captures writes in Postgres.
    """

    def __init__(self, recorder: ChangeRecorder | None = None) -> None:
        self._recorder = recorder
        self._tables: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self._tracked: set[str] = set()

    def rows(self, table_name: str) -> list[dict[str, Any]]:
        """Snapshot of every row of ``table_name``."""
        return [copy.deepcopy(row) for row in self._tables[table_name].values()]

    def get_row(self, table_name: str, record_id: str) -> dict[str, Any] | None:
        row = self._tables[table_name].get(str(record_id))
        return copy.deepcopy(row) if row is not None else None

    async def insert_row(
        self,
        table_name: str,
        row: dict[str, Any],
        *,
        changed_by: str | None = None,
    ) -> dict[str, Any]:
        if "id" not in row:
            raise ValueError("row must carry an id")
        stored = copy.deepcopy(row)
        self._tables[table_name][str(stored["id"])] = stored
        await self._capture(table_name, HistoryAction.INSERT, None, stored, changed_by)
        return copy.deepcopy(stored)

    async def update_row(
        self,
        table_name: str,
        record_id: str,
        changes: dict[str, Any],
        *,
        changed_by: str | None = None,
    ) -> dict[str, Any]:
        table = self._tables[table_name]
        current = table.get(str(record_id))
        if current is None:
            raise NotFoundError("Record not found")
        updated = {**current, **copy.deepcopy(changes)}
        table[str(record_id)] = updated
        await self._capture(table_name, HistoryAction.UPDATE, current, updated, changed_by)
        return copy.deepcopy(updated)

    async def delete_row(
        self,
        table_name: str,
        record_id: str,
        *,
        changed_by: str | None = None,
    ) -> None:
        removed = self._tables[table_name].pop(str(record_id), None)
        if removed is None:
            raise NotFoundError("Record not found")
        await self._capture(table_name, HistoryAction.DELETE, removed, None, changed_by)

    async def update_record(
        self,
        table_name: str,
        record_id: str,
        data: dict[str, Any],
        *,
        acting_user_id: str | None = None,
    ) -> dict[str, Any]:
        validate_identifier(table_name, "table name")
        changes = {key: value for key, value in data.items() if key != "id"}
        for column in changes:
            validate_identifier(column, "column name")
        return await self.update_row(table_name, record_id, changes, changed_by=acting_user_id)

    async def enable_table_tracking(self, table_name: str) -> TrackingResult:
        validate_identifier(table_name, "table name")
        if table_name in self._tracked:
            return TrackingResult(
                table_name=table_name,
                tracked=True,
                changed=False,
                message=f"Tracking already enabled for {table_name}",
            )
        self._tracked.add(table_name)
        return TrackingResult(
            table_name=table_name,
            tracked=True,
            changed=True,
            message=f"Tracking enabled for {table_name}",
        )

    async def disable_table_tracking(self, table_name: str) -> TrackingResult:
        validate_identifier(table_name, "table name")
        if table_name not in self._tracked:
            return TrackingResult(
                table_name=table_name,
                tracked=False,
                changed=False,
                message=f"Tracking not enabled for {table_name}",
            )
        self._tracked.discard(table_name)
        return TrackingResult(
            table_name=table_name,
            tracked=False,
            changed=True,
            message=f"Tracking disabled for {table_name}",
        )

    async def get_tracked_tables(self) -> list[str]:
        return sorted(self._tracked)

    async def _capture(
        self,
        table_name: str,
        action: HistoryAction,
        old: dict[str, Any] | None,
        new: dict[str, Any] | None,
        changed_by: str | None,
    ) -> None:
        if self._recorder is None or table_name not in self._tracked:
            return
        source = new if new is not None else old
        await self._recorder.record(
            table_name=table_name,
            record_id=str(source["id"]),
            action=action,
            old_data=copy.deepcopy(old),
            new_data=copy.deepcopy(new),
            changed_by=changed_by,
        )
