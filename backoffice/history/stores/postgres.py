"""PostgreSQL implementations of HistoryStore and RecordGateway.

History rows are written by the track_data_changes() trigger; this module
only reads them, and installs or removes the per-table triggers.
"""

import json
from typing import Any

from backoffice.db.errors import (
    ConnectionError,
    NotFoundError,
    StoreError,
    ValidationError,
    validate_identifier,
)
from backoffice.db.pool import PostgresPool
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
)
from backoffice.history.store import HistoryStore
from backoffice.observability.logging import get_logger

logger = get_logger(__name__)

_COLUMNS = (
    "id, table_name, record_id, action, old_data, new_data, "
    "changed_fields, changed_by, changed_at"
)


def _json(value: Any) -> dict[str, Any] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)


def _trigger_name(table_name: str) -> str:
    return f"track_{table_name}_changes"


class PostgresHistoryStore(HistoryStore):
    """PostgreSQL implementation of HistoryStore."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def save(self, record: HistoryRecord) -> HistoryRecord:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO data_history (
                        table_name, record_id, action, old_data, new_data,
                        changed_fields, changed_by, changed_at
                    ) VALUES ($1, $2, $3, $4::jsonb, $5::jsonb, $6, $7, $8)
                    RETURNING {_COLUMNS}
                    """,
                    record.table_name,
                    record.record_id,
                    record.action.value,
                    json.dumps(record.old_data) if record.old_data is not None else None,
                    json.dumps(record.new_data) if record.new_data is not None else None,
                    record.changed_fields,
                    record.changed_by,
                    record.changed_at,
                )
                return self._row_to_record(row)
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_save_history_error", table_name=record.table_name, error=str(e))
            raise ConnectionError(f"Failed to save history record: {e}", cause=e) from e

    async def get(self, history_id: int) -> HistoryRecord | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {_COLUMNS} FROM data_history WHERE id = $1",
                    history_id,
                )
                return self._row_to_record(row) if row else None
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_get_history_error", history_id=history_id, error=str(e))
            raise ConnectionError(f"Failed to get history record: {e}", cause=e) from e

    async def list_history(self, filter: HistoryFilter) -> HistoryPage:
        where = "WHERE 1=1"
        params: list[Any] = []

        if filter.table_name is not None:
            params.append(filter.table_name)
            where += f" AND table_name = ${len(params)}"
        if filter.record_id is not None:
            params.append(filter.record_id)
            where += f" AND record_id = ${len(params)}"
        if filter.action is not None:
            params.append(filter.action.value)
            where += f" AND action = ${len(params)}"
        if filter.changed_by is not None:
            params.append(filter.changed_by)
            where += f" AND changed_by = ${len(params)}"
        if filter.start_date is not None:
            params.append(filter.start_date)
            where += f" AND changed_at >= ${len(params)}"
        if filter.end_date is not None:
            params.append(filter.end_date)
            where += f" AND changed_at <= ${len(params)}"

        count_query = f"SELECT COUNT(*) FROM data_history {where}"
        query = (
            f"SELECT {_COLUMNS} FROM data_history {where} "
            f"ORDER BY changed_at DESC, id DESC "
            f"LIMIT ${len(params) + 1} OFFSET ${len(params) + 2}"
        )

        try:
            async with self._pool.acquire() as conn:
                total = await conn.fetchval(count_query, *params)
                rows = await conn.fetch(query, *params, filter.limit, filter.offset)
                return HistoryPage(
                    items=[self._row_to_record(row) for row in rows],
                    total=total or 0,
                    limit=filter.limit,
                    offset=filter.offset,
                )
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_list_history_error", table_name=filter.table_name, error=str(e))
            raise ConnectionError(f"Failed to list history: {e}", cause=e) from e

    async def get_record_history(
        self,
        table_name: str,
        record_id: str,
        *,
        limit: int = 50,
    ) -> list[HistoryRecord]:
        page = await self.list_history(
            HistoryFilter(table_name=table_name, record_id=str(record_id), limit=limit)
        )
        return page.items

    async def get_change_timeline(
        self,
        table_name: str,
        record_id: str,
    ) -> list[TimelineEntry]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT id, action, changed_fields, changed_by, changed_at
                    FROM data_history
                    WHERE table_name = $1 AND record_id = $2
                    ORDER BY changed_at ASC, id ASC
                    """,
                    table_name,
                    str(record_id),
                )
                return [
                    TimelineEntry(
                        id=row["id"],
                        action=HistoryAction(row["action"]),
                        changed_fields=list(row["changed_fields"] or []),
                        changed_by=row["changed_by"],
                        changed_at=row["changed_at"],
                    )
                    for row in rows
                ]
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_history_timeline_error", table_name=table_name, error=str(e))
            raise ConnectionError(f"Failed to get change timeline: {e}", cause=e) from e

    async def get_record_change_summary(
        self,
        table_name: str,
        record_id: str,
    ) -> list[ActionSummary]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT action,
                           COUNT(*) AS count,
                           MIN(changed_at) AS first_change,
                           MAX(changed_at) AS last_change,
                           array_remove(array_agg(DISTINCT changed_by), NULL) AS users
                    FROM data_history
                    WHERE table_name = $1 AND record_id = $2
                    GROUP BY action
                    ORDER BY action
                    """,
                    table_name,
                    str(record_id),
                )
                return [
                    ActionSummary(
                        action=HistoryAction(row["action"]),
                        count=row["count"],
                        first_change=row["first_change"],
                        last_change=row["last_change"],
                        users=sorted(row["users"] or []),
                    )
                    for row in rows
                ]
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_history_summary_error", table_name=table_name, error=str(e))
            raise ConnectionError(f"Failed to get change summary: {e}", cause=e) from e

    async def get_latest_version(
        self,
        table_name: str,
        record_id: str,
    ) -> HistoryRecord | None:
        records = await self.get_record_history(table_name, record_id, limit=1)
        return records[0] if records else None

    async def get_stats(self, days: int = 30, table_name: str | None = None) -> HistoryStats:
        params: list[Any] = [days]
        where = "WHERE changed_at >= NOW() - make_interval(days => $1)"
        if table_name is not None:
            params.append(table_name)
            where += " AND table_name = $2"

        try:
            async with self._pool.acquire() as conn:
                table_rows = await conn.fetch(
                    f"""
                    SELECT table_name, action,
                           COUNT(*) AS count,
                           COUNT(DISTINCT record_id) AS unique_records,
                           COUNT(DISTINCT changed_by) AS unique_users
                    FROM data_history
                    {where}
                    GROUP BY table_name, action
                    ORDER BY count DESC
                    """,
                    *params,
                )
                daily_rows = await conn.fetch(
                    f"""
                    SELECT (changed_at AT TIME ZONE 'UTC')::date AS day, COUNT(*) AS count
                    FROM data_history
                    {where}
                    GROUP BY day
                    ORDER BY day DESC
                    """,
                    *params,
                )
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_history_stats_error", days=days, error=str(e))
            raise ConnectionError(f"Failed to get history stats: {e}", cause=e) from e

        return HistoryStats(
            days=days,
            table_name=table_name,
            by_table=[
                TableActionStats(
                    table_name=row["table_name"],
                    action=HistoryAction(row["action"]),
                    count=row["count"],
                    unique_records=row["unique_records"],
                    unique_users=row["unique_users"],
                )
                for row in table_rows
            ],
            daily=[DailyTrend(day=row["day"], count=row["count"]) for row in daily_rows],
        )

    def _row_to_record(self, row: Any) -> HistoryRecord:
        return HistoryRecord(
            id=row["id"],
            table_name=row["table_name"],
            record_id=row["record_id"],
            action=HistoryAction(row["action"]),
            old_data=_json(row["old_data"]),
            new_data=_json(row["new_data"]),
            changed_fields=list(row["changed_fields"] or []),
            changed_by=row["changed_by"],
            changed_at=row["changed_at"],
        )


class PostgresRecordGateway(RecordGateway):
    """Writes reverted rows and manages track_<table>_changes triggers."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def update_record(
        self,
        table_name: str,
        record_id: str,
        data: dict[str, Any],
        *,
        acting_user_id: str | None = None,
    ) -> dict[str, Any]:
        table = validate_identifier(table_name, "table name")
        columns = [validate_identifier(c, "column name") for c in data if c != "id"]
        if not columns:
            raise ValidationError("No columns to restore")

        column_list = ", ".join(f'"{c}"' for c in columns)
        # jsonb_populate_record casts each value to the column's own type
        query = f"""
            UPDATE "{table}" SET ({column_list}) = (
                SELECT {column_list} FROM jsonb_populate_record(NULL::"{table}", $1::jsonb)
            )
            WHERE id::text = $2
            RETURNING to_jsonb("{table}") AS row
        """

        try:
            async with self._pool.transaction(acting_user_id) as conn:
                row = await conn.fetchrow(query, json.dumps(data), str(record_id))
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_revert_update_error", table_name=table, error=str(e))
            raise ConnectionError(f"Failed to update record: {e}", cause=e) from e

        if row is None:
            raise NotFoundError("Record not found")
        return _json(row["row"]) or {}

    async def _has_trigger(self, conn: Any, table: str) -> bool:
        return bool(
            await conn.fetchval(
                """
                SELECT EXISTS (
                    SELECT 1 FROM pg_trigger
                    WHERE tgname = $1 AND tgrelid = $2::regclass
                )
                """,
                _trigger_name(table),
                table,
            )
        )

    async def enable_table_tracking(self, table_name: str) -> TrackingResult:
        table = validate_identifier(table_name, "table name")
        try:
            async with self._pool.acquire() as conn:
                if await self._has_trigger(conn, table):
                    return TrackingResult(
                        table_name=table,
                        tracked=True,
                        changed=False,
                        message=f"Tracking already enabled for {table}",
                    )
                await conn.execute(
                    f'CREATE TRIGGER "{_trigger_name(table)}" '
                    f'AFTER INSERT OR UPDATE OR DELETE ON "{table}" '
                    f"FOR EACH ROW EXECUTE FUNCTION track_data_changes()"
                )
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_enable_tracking_error", table_name=table, error=str(e))
            raise ConnectionError(f"Failed to enable tracking: {e}", cause=e) from e

        logger.info("table_tracking_enabled", table_name=table)
        return TrackingResult(
            table_name=table,
            tracked=True,
            changed=True,
            message=f"Tracking enabled for {table}",
        )

    async def disable_table_tracking(self, table_name: str) -> TrackingResult:
        table = validate_identifier(table_name, "table name")
        try:
            async with self._pool.acquire() as conn:
                if not await self._has_trigger(conn, table):
                    return TrackingResult(
                        table_name=table,
                        tracked=False,
                        changed=False,
                        message=f"Tracking not enabled for {table}",
                    )
                await conn.execute(f'DROP TRIGGER "{_trigger_name(table)}" ON "{table}"')
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_disable_tracking_error", table_name=table, error=str(e))
            raise ConnectionError(f"Failed to disable tracking: {e}", cause=e) from e

        logger.info("table_tracking_disabled", table_name=table)
        return TrackingResult(
            table_name=table,
            tracked=False,
            changed=True,
            message=f"Tracking disabled for {table}",
        )

    async def get_tracked_tables(self) -> list[str]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT DISTINCT c.relname AS table_name
                    FROM pg_trigger t
                    JOIN pg_class c ON c.oid = t.tgrelid
                    JOIN pg_proc p ON p.oid = t.tgfoid
                    WHERE p.proname = 'track_data_changes' AND NOT t.tgisinternal
                    ORDER BY c.relname
                    """
                )
                return [row["table_name"] for row in rows]
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_tracked_tables_error", error=str(e))
            raise ConnectionError(f"Failed to list tracked tables: {e}", cause=e) from e
