"""HTTP client that forwards audit entries to a backoffice server.

Usage:
    async with AuditClient(base_url="https://admin.example.com/v1", token="eyJ...") as client:
        result = await client.log("settings_changed", entity="settings", details={"key": "theme"})
"""

from typing import Any

import httpx
from pydantic import BaseModel

from backoffice.local_storage import InMemoryLocalStorage, LocalStorage
from backoffice.observability.logging import get_logger

logger = get_logger(__name__)

LAST_AUDIT_KEY = "lastAudit"


class AuditSendResult(BaseModel):
    """Outcome of forwarding one audit entry.

    When ``ok`` is False the payload was kept in local storage under
    ``lastAudit``.
    """

    ok: bool
    status_code: int | None = None
    error: str | None = None


class AuditClient:
    """Best-effort audit forwarder; ``log`` never raises."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000/v1",
        token: str | None = None,
        storage: LocalStorage | None = None,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._storage = storage or InMemoryLocalStorage()
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "AuditClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @property
    def last_unsent(self) -> dict[str, Any] | None:
        """The most recent payload that could not be delivered."""
        return self._storage.get(LAST_AUDIT_KEY)

    async def log(
        self,
        action: str,
        entity: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> AuditSendResult:
        payload = {"action": action, "entity": entity, "details": details or {}}
        try:
            response = await self._client.post("/audit-logs", json=payload, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            return self._fallback(payload, str(e), e.response.status_code)
        except httpx.HTTPError as e:
            return self._fallback(payload, str(e), None)
        return AuditSendResult(ok=True, status_code=response.status_code)

    def _fallback(
        self,
        payload: dict[str, Any],
        error: str,
        status_code: int | None,
    ) -> AuditSendResult:
        logger.warning("audit_forward_failed", action=payload["action"], error=error)
        try:
            self._storage.set(LAST_AUDIT_KEY, payload)
        except OSError as e:
            logger.warning("audit_fallback_store_failed", action=payload["action"], error=str(e))
        return AuditSendResult(ok=False, status_code=status_code, error=error)
