"""Tests for the Postgres history store and record gateway against a mocked connection."""

import json
from datetime import UTC, datetime

import pytest

from backoffice.db.errors import NotFoundError, ValidationError
from backoffice.history.models import HistoryAction, HistoryFilter
from backoffice.history.stores.postgres import PostgresHistoryStore, PostgresRecordGateway


def history_row(**overrides):
    row = {
        "id": 3,
        "table_name": "settings",
        "record_id": "1",
        "action": "update",
        "old_data": json.dumps({"id": 1, "value": "a"}),
        "new_data": {"id": 1, "value": "b"},
        "changed_fields": ["value"],
        "changed_by": "admin-1",
        "changed_at": datetime(2024, 1, 1, tzinfo=UTC),
    }
    row.update(overrides)
    return row


class TestPostgresHistoryStore:
    async def test_list_history_builds_query(self, fake_pool) -> None:
        fake_pool.conn.fetchval.return_value = 1
        fake_pool.conn.fetch.return_value = [history_row()]
        store = PostgresHistoryStore(fake_pool)

        page = await store.list_history(
            HistoryFilter(table_name="settings", action=HistoryAction.UPDATE, limit=10, offset=5)
        )

        query, *params = fake_pool.conn.fetch.await_args.args
        assert "table_name = $1" in query
        assert "action = $2" in query
        assert "LIMIT $3 OFFSET $4" in query
        assert params == ["settings", "update", 10, 5]
        assert page.total == 1
        assert page.items[0].old_data == {"id": 1, "value": "a"}
        assert page.items[0].new_data == {"id": 1, "value": "b"}

    async def test_get_missing(self, fake_pool) -> None:
        fake_pool.conn.fetchrow.return_value = None
        assert await PostgresHistoryStore(fake_pool).get(1) is None


class TestPostgresRecordGateway:
    async def test_update_record_sets_acting_user(self, fake_pool) -> None:
        fake_pool.conn.fetchrow.return_value = {"row": json.dumps({"id": 1, "value": "a"})}
        gateway = PostgresRecordGateway(fake_pool)

        row = await gateway.update_record(
            "settings", "1", {"id": 1, "value": "a"}, acting_user_id="admin-1"
        )

        query, payload, record_id = fake_pool.conn.fetchrow.await_args.args
        assert 'UPDATE "settings" SET ("value")' in query
        assert json.loads(payload) == {"id": 1, "value": "a"}
        assert record_id == "1"
        assert fake_pool.acting_users == ["admin-1"]
        assert row == {"id": 1, "value": "a"}

    async def test_update_record_missing_row(self, fake_pool) -> None:
        fake_pool.conn.fetchrow.return_value = None
        with pytest.raises(NotFoundError):
            await PostgresRecordGateway(fake_pool).update_record("settings", "9", {"value": "x"})

    async def test_update_record_rejects_unsafe_columns(self, fake_pool) -> None:
        with pytest.raises(ValidationError):
            await PostgresRecordGateway(fake_pool).update_record(
                "settings", "1", {'value" = NULL; --': "x"}
            )

    async def test_enable_tracking_creates_trigger(self, fake_pool) -> None:
        fake_pool.conn.fetchval.return_value = False
        result = await PostgresRecordGateway(fake_pool).enable_table_tracking("orders")

        statement = fake_pool.conn.execute.await_args.args[0]
        assert 'CREATE TRIGGER "track_orders_changes"' in statement
        assert "track_data_changes()" in statement
        assert result.changed is True

    async def test_enable_tracking_when_present(self, fake_pool) -> None:
        fake_pool.conn.fetchval.return_value = True
        result = await PostgresRecordGateway(fake_pool).enable_table_tracking("orders")
        fake_pool.conn.execute.assert_not_awaited()
        assert result.message == "Tracking already enabled for orders"

    async def test_disable_tracking_drops_trigger(self, fake_pool) -> None:
        fake_pool.conn.fetchval.return_value = True
        result = await PostgresRecordGateway(fake_pool).disable_table_tracking("orders")
        assert fake_pool.conn.execute.await_args.args[0] == 'DROP TRIGGER "track_orders_changes" ON "orders"'
        assert result.tracked is False
