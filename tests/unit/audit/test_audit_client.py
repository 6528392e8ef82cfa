"""Tests for AuditClient."""

import errno
import json

import httpx

from backoffice.audit.client import LAST_AUDIT_KEY, AuditClient
from backoffice.local_storage import InMemoryLocalStorage


def make_client(handler, storage=None) -> AuditClient:
    return AuditClient(
        base_url="http://test/v1",
        token="tok",
        storage=storage or InMemoryLocalStorage(),
        transport=httpx.MockTransport(handler),
    )


class TestAuditClient:
    async def test_posts_entry(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(201, json={"id": "abc"})

        async with make_client(handler) as client:
            result = await client.log("settings_changed", entity="settings", details={"k": "v"})

        assert result.ok is True
        assert result.status_code == 201
        request = captured[0]
        assert request.url.path == "/v1/audit-logs"
        assert request.headers["Authorization"] == "Bearer tok"
        assert json.loads(request.content) == {
            "action": "settings_changed",
            "entity": "settings",
            "details": {"k": "v"},
        }
        assert client.last_unsent is None

    async def test_server_error_keeps_payload(self) -> None:
        storage = InMemoryLocalStorage()

        async with make_client(lambda r: httpx.Response(500), storage) as client:
            result = await client.log("user_login")

        assert result.ok is False
        assert result.status_code == 500
        assert storage.get(LAST_AUDIT_KEY)["action"] == "user_login"

    async def test_network_error_keeps_payload(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        async with make_client(handler) as client:
            result = await client.log("user_logout")
            assert client.last_unsent["action"] == "user_logout"

        assert result.ok is False
        assert result.status_code is None

    async def test_storage_failure_does_not_raise(self) -> None:
        class FullDiskStorage(InMemoryLocalStorage):
            def set(self, key, value) -> None:
                raise OSError(errno.ENOSPC, "No space left on device")

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        async with make_client(handler, FullDiskStorage()) as client:
            result = await client.log("user_login")

        assert result.ok is False
        assert client.last_unsent is None
