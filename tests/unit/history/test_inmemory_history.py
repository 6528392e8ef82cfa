"""Tests for InMemoryHistoryStore and InMemoryRecordGateway."""

from datetime import UTC, datetime, timedelta

import pytest

from backoffice.db.errors import NotFoundError, ValidationError
from backoffice.history.models import HistoryAction, HistoryFilter, HistoryRecord, utc_now
from backoffice.history.recorder import ChangeRecorder
from backoffice.history.stores.inmemory import InMemoryHistoryStore, InMemoryRecordGateway


def make_record(**overrides) -> HistoryRecord:
    data = {
        "table_name": "settings",
        "record_id": "1",
        "action": HistoryAction.UPDATE,
        "old_data": {"id": 1, "value": "a"},
        "new_data": {"id": 1, "value": "b"},
        "changed_fields": ["value"],
        "changed_by": "admin-1",
    }
    data.update(overrides)
    return HistoryRecord(**data)


@pytest.fixture
def store() -> InMemoryHistoryStore:
    return InMemoryHistoryStore()


class TestListHistory:
    async def test_newest_first_with_total(self, store: InMemoryHistoryStore) -> None:
        base = datetime(2024, 1, 1, tzinfo=UTC)
        for i in range(5):
            await store.save(make_record(changed_at=base + timedelta(hours=i)))

        page = await store.list_history(HistoryFilter(limit=2, offset=1))

        assert page.total == 5
        assert [r.id for r in page.items] == [4, 3]

    async def test_filters_combine(self, store: InMemoryHistoryStore) -> None:
        await store.save(make_record())
        await store.save(make_record(table_name="orders"))
        await store.save(make_record(changed_by="someone-else"))
        await store.save(make_record(action=HistoryAction.DELETE, new_data=None))

        page = await store.list_history(
            HistoryFilter(table_name="settings", changed_by="admin-1", action=HistoryAction.UPDATE)
        )

        assert [r.id for r in page.items] == [1]

    async def test_date_range(self, store: InMemoryHistoryStore) -> None:
        old = await store.save(make_record(changed_at=datetime(2023, 1, 1, tzinfo=UTC)))
        await store.save(make_record(changed_at=datetime(2024, 6, 1, tzinfo=UTC)))

        page = await store.list_history(
            HistoryFilter(end_date=datetime(2023, 12, 31, tzinfo=UTC))
        )

        assert [r.id for r in page.items] == [old.id]


class TestRecordViews:
    async def test_timeline_is_chronological(self, store: InMemoryHistoryStore) -> None:
        base = datetime(2024, 1, 1, tzinfo=UTC)
        await store.save(make_record(changed_at=base + timedelta(hours=2)))
        await store.save(
            make_record(action=HistoryAction.INSERT, old_data=None, changed_at=base)
        )

        timeline = await store.get_change_timeline("settings", "1")

        assert [e.action for e in timeline] == [HistoryAction.INSERT, HistoryAction.UPDATE]

    async def test_summary_groups_by_action(self, store: InMemoryHistoryStore) -> None:
        await store.save(make_record(changed_by="b"))
        await store.save(make_record(changed_by="a"))
        await store.save(make_record(changed_by=None))

        summary = await store.get_record_change_summary("settings", "1")

        assert len(summary) == 1
        assert summary[0].action == HistoryAction.UPDATE
        assert summary[0].count == 3
        assert summary[0].users == ["a", "b"]

    async def test_latest_version(self, store: InMemoryHistoryStore) -> None:
        await store.save(make_record())
        latest = await store.save(make_record(new_data={"id": 1, "value": "c"}))
        assert await store.get_latest_version("settings", "1") == latest
        assert await store.get_latest_version("settings", "404") is None

    async def test_record_history_limit(self, store: InMemoryHistoryStore) -> None:
        for _ in range(3):
            await store.save(make_record())
        assert len(await store.get_record_history("settings", "1", limit=2)) == 2


class TestStats:
    async def test_window_and_grouping(self, store: InMemoryHistoryStore) -> None:
        await store.save(make_record())
        await store.save(make_record(record_id="2", changed_by="other"))
        await store.save(make_record(table_name="orders", action=HistoryAction.INSERT, old_data=None))
        await store.save(make_record(changed_at=utc_now() - timedelta(days=90)))

        stats = await store.get_stats(days=30)

        assert stats.by_table[0].table_name == "settings"
        assert stats.by_table[0].count == 2
        assert stats.by_table[0].unique_records == 2
        assert stats.by_table[0].unique_users == 2
        assert sum(d.count for d in stats.daily) == 3

    async def test_table_filter(self, store: InMemoryHistoryStore) -> None:
        await store.save(make_record())
        await store.save(make_record(table_name="orders"))
        stats = await store.get_stats(table_name="orders")
        assert [s.table_name for s in stats.by_table] == ["orders"]


class TestRecordGateway:
    @pytest.fixture
    def gateway(self, store: InMemoryHistoryStore) -> InMemoryRecordGateway:
        return InMemoryRecordGateway(recorder=ChangeRecorder(store))

    async def test_tracking_is_idempotent(self, gateway: InMemoryRecordGateway) -> None:
        first = await gateway.enable_table_tracking("orders")
        second = await gateway.enable_table_tracking("orders")
        assert first.changed is True
        assert second.changed is False
        assert second.message == "Tracking already enabled for orders"
        assert await gateway.get_tracked_tables() == ["orders"]

        disabled = await gateway.disable_table_tracking("orders")
        assert disabled.message == "Tracking disabled for orders"
        again = await gateway.disable_table_tracking("orders")
        assert again.changed is False
        assert await gateway.get_tracked_tables() == []

    async def test_rejects_unsafe_table_names(self, gateway: InMemoryRecordGateway) -> None:
        with pytest.raises(ValidationError):
            await gateway.enable_table_tracking("orders; DROP TABLE users")

    async def test_only_tracked_tables_are_recorded(
        self, gateway: InMemoryRecordGateway, store: InMemoryHistoryStore
    ) -> None:
        await gateway.insert_row("orders", {"id": 1, "total": 10})
        await gateway.enable_table_tracking("orders")
        await gateway.update_row("orders", "1", {"total": 12}, changed_by="u1")
        await gateway.delete_row("orders", "1", changed_by="u1")

        page = await store.list_history(HistoryFilter(table_name="orders"))
        assert [r.action for r in page.items] == [HistoryAction.DELETE, HistoryAction.UPDATE]
        assert page.items[1].changed_fields == ["total"]

    async def test_update_record_missing_row(self, gateway: InMemoryRecordGateway) -> None:
        with pytest.raises(NotFoundError):
            await gateway.update_record("orders", "99", {"total": 1})

    async def test_update_record_ignores_id(self, gateway: InMemoryRecordGateway) -> None:
        await gateway.insert_row("orders", {"id": 1, "total": 10})
        row = await gateway.update_record("orders", "1", {"id": 5, "total": 3})
        assert row == {"id": 1, "total": 3}
