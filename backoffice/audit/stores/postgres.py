"""PostgreSQL implementation of AuditLogStore."""

import json
from datetime import datetime, timedelta
from typing import Any

from backoffice.audit.models import AuditLogEntry, AuditLogFilter, AuditLogStats
from backoffice.audit.store import AuditLogStore
from backoffice.db.errors import ConnectionError, StoreError
from backoffice.db.pool import PostgresPool
from backoffice.observability.logging import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, user_id, user_role, action, details, ip_address, user_agent, session_id, created_at"


def _where(filter: AuditLogFilter) -> tuple[str, list[Any]]:
    clause = "WHERE 1=1"
    params: list[Any] = []

    if filter.start_date is not None:
        params.append(filter.start_date)
        clause += f" AND created_at >= ${len(params)}"
    if filter.end_date is not None:
        params.append(filter.end_date)
        clause += f" AND created_at <= ${len(params)}"
    if filter.user_id:
        params.append(f"%{filter.user_id}%")
        clause += f" AND user_id ILIKE ${len(params)}"
    if filter.action:
        params.append(f"%{filter.action}%")
        clause += f" AND action ILIKE ${len(params)}"
    if filter.q:
        params.append(f"%{filter.q}%")
        n = len(params)
        clause += f" AND (action ILIKE ${n} OR user_id ILIKE ${n} OR details::text ILIKE ${n})"

    return clause, params


class PostgresAuditLogStore(AuditLogStore):
    """PostgreSQL implementation of AuditLogStore.

    Unlike the ring buffer the table is not capped; old rows are removed
    with clear(before=...).
    """

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO audit_logs (
                        id, user_id, user_role, action, details,
                        ip_address, user_agent, session_id, created_at
                    ) VALUES ($1, $2, $3, $4, $5::jsonb, $6, $7, $8, $9)
                    """,
                    entry.id,
                    entry.user_id,
                    entry.user_role,
                    entry.action,
                    json.dumps(entry.details, default=str),
                    entry.ip_address,
                    entry.user_agent,
                    entry.session_id,
                    entry.timestamp,
                )
                return entry
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_append_audit_log_error", action=entry.action, error=str(e))
            raise ConnectionError(f"Failed to append audit log: {e}", cause=e) from e

    async def list(self, filter: AuditLogFilter) -> list[AuditLogEntry]:
        clause, params = _where(filter)
        query = f"SELECT {_COLUMNS} FROM audit_logs {clause} ORDER BY created_at DESC"
        if filter.limit is not None:
            params.append(filter.limit)
            query += f" LIMIT ${len(params)}"
        if filter.offset:
            params.append(filter.offset)
            query += f" OFFSET ${len(params)}"

        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(query, *params)
                return [self._row_to_entry(row) for row in rows]
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_list_audit_logs_error", error=str(e))
            raise ConnectionError(f"Failed to list audit logs: {e}", cause=e) from e

    async def count(self, filter: AuditLogFilter) -> int:
        clause, params = _where(filter)
        try:
            async with self._pool.acquire() as conn:
                return await conn.fetchval(f"SELECT COUNT(*) FROM audit_logs {clause}", *params) or 0
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_count_audit_logs_error", error=str(e))
            raise ConnectionError(f"Failed to count audit logs: {e}", cause=e) from e

    async def clear(self, before: datetime | None = None) -> int:
        try:
            async with self._pool.acquire() as conn:
                if before is None:
                    status = await conn.execute("DELETE FROM audit_logs")
                else:
                    status = await conn.execute(
                        "DELETE FROM audit_logs WHERE created_at <= $1",
                        before,
                    )
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_clear_audit_logs_error", error=str(e))
            raise ConnectionError(f"Failed to clear audit logs: {e}", cause=e) from e

        # asyncpg returns the command tag, e.g. "DELETE 12"
        return int(status.split()[-1])

    async def stats(self, now: datetime, top: int = 10) -> AuditLogStats:
        try:
            async with self._pool.acquire() as conn:
                summary = await conn.fetchrow(
                    """
                    SELECT COUNT(*) AS total,
                           COUNT(*) FILTER (WHERE created_at > $1) AS last_24_hours,
                           COUNT(*) FILTER (WHERE created_at > $2) AS last_week,
                           MIN(created_at) AS oldest_log,
                           MAX(created_at) AS newest_log
                    FROM audit_logs
                    """,
                    now - timedelta(days=1),
                    now - timedelta(days=7),
                )
                actions = await conn.fetch(
                    """
                    SELECT action AS name, COUNT(*) AS count FROM audit_logs
                    GROUP BY action ORDER BY count DESC LIMIT $1
                    """,
                    top,
                )
                users = await conn.fetch(
                    """
                    SELECT user_id AS name, COUNT(*) AS count FROM audit_logs
                    WHERE user_id IS NOT NULL
                    GROUP BY user_id ORDER BY count DESC LIMIT $1
                    """,
                    top,
                )
        except StoreError:
            raise
        except Exception as e:
            logger.error("postgres_audit_stats_error", error=str(e))
            raise ConnectionError(f"Failed to compute audit log stats: {e}", cause=e) from e

        return AuditLogStats(
            total=summary["total"],
            last_24_hours=summary["last_24_hours"],
            last_week=summary["last_week"],
            top_actions={row["name"]: row["count"] for row in actions},
            top_users={row["name"]: row["count"] for row in users},
            oldest_log=summary["oldest_log"],
            newest_log=summary["newest_log"],
        )

    def _row_to_entry(self, row: Any) -> AuditLogEntry:
        details = row["details"]
        if isinstance(details, str):
            details = json.loads(details)
        if details is None:
            details = {}
        elif not isinstance(details, dict):
            details = {"message": details}
        return AuditLogEntry(
            id=row["id"],
            timestamp=row["created_at"],
            user_id=row["user_id"] or "unknown",
            user_role=row["user_role"] or "user",
            action=row["action"],
            details=details,
            ip_address=row["ip_address"],
            user_agent=row["user_agent"],
            session_id=row["session_id"],
        )
