"""Tests for the /v1/audit-logs endpoints."""

import csv
import io

from fastapi.testclient import TestClient

from backoffice.audit.export import CSV_HEADER


def post_log(client: TestClient, headers, **body):
    return client.post("/v1/audit-logs", json=body, headers=headers)


class TestCreateAuditLog:
    def test_any_user_may_log(self, client: TestClient, user_headers, admin_headers) -> None:
        response = post_log(
            client,
            user_headers,
            action="order_created",
            entity="orders",
            details={"orderId": 7},
        )

        assert response.status_code == 201
        assert response.json()["message"] == "Audit log entry created"

        entry = client.get("/v1/audit-logs", headers=admin_headers).json()[0]
        assert entry["user_id"] == "user-1"
        assert entry["details"] == {"orderId": 7, "entity": "orders"}
        assert entry["user_agent"] == "testclient"

    def test_string_details(self, client: TestClient, user_headers, admin_headers) -> None:
        post_log(client, user_headers, action="note", details="hello")
        entry = client.get("/v1/audit-logs", headers=admin_headers).json()[0]
        assert entry["details"] == {"message": "hello"}

    def test_forwarded_ip(self, client: TestClient, user_headers, admin_headers) -> None:
        headers = {**user_headers, "X-Forwarded-For": "203.0.113.5, 10.0.0.1"}
        post_log(client, headers, action="user_login")
        entry = client.get("/v1/audit-logs", headers=admin_headers).json()[0]
        assert entry["ip_address"] == "203.0.113.5"

    def test_missing_action(self, client: TestClient, user_headers) -> None:
        response = post_log(client, user_headers, action="  ")
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Missing action"

    def test_user_cannot_impersonate(self, client: TestClient, user_headers, admin_headers) -> None:
        post_log(client, user_headers, action="user_login", userId="someone-else")
        entry = client.get("/v1/audit-logs", headers=admin_headers).json()[0]
        assert entry["user_id"] == "user-1"

    def test_admin_may_attribute(self, client: TestClient, admin_headers) -> None:
        post_log(client, admin_headers, action="user_login", userId="someone-else")
        entry = client.get("/v1/audit-logs", headers=admin_headers).json()[0]
        assert entry["user_id"] == "someone-else"


class TestListAuditLogs:
    def test_requires_read_permission(self, client: TestClient, user_headers) -> None:
        assert client.get("/v1/audit-logs", headers=user_headers).status_code == 403

    def test_manager_may_read(self, client: TestClient, make_token) -> None:
        headers = {"Authorization": f"Bearer {make_token(sub='m-1', role='manager')}"}
        assert client.get("/v1/audit-logs", headers=headers).status_code == 200

    def test_filters_and_limit(self, client: TestClient, admin_headers) -> None:
        for action in ("user_login", "user_logout", "user_login"):
            post_log(client, admin_headers, action=action)

        logs = client.get("/v1/audit-logs?action=LOGIN&limit=1", headers=admin_headers).json()

        assert len(logs) == 1
        assert logs[0]["action"] == "user_login"

    def test_pagination_envelope(self, client: TestClient, admin_headers) -> None:
        for i in range(5):
            post_log(client, admin_headers, action=f"event_{i}")

        body = client.get("/v1/audit-logs?page=2&pageSize=2", headers=admin_headers).json()

        assert [e["action"] for e in body["data"]] == ["event_2", "event_1"]
        assert body["pagination"] == {"page": 2, "pageSize": 2, "total": 5, "totalPages": 3}

    def test_csv_export(self, client: TestClient, admin_headers) -> None:
        post_log(client, admin_headers, action="data_exported", details={"rows": 3})

        response = client.get("/v1/audit-logs?format=csv", headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="audit-logs.csv"' in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0] == ",".join(CSV_HEADER)
        row = next(csv.reader(io.StringIO(lines[1])))
        assert row[3] == "data_exported"

    def test_json_export(self, client: TestClient, admin_headers) -> None:
        post_log(client, admin_headers, action="data_exported")
        response = client.get("/v1/audit-logs?format=json", headers=admin_headers)
        assert response.json()[0]["userId"] == "admin-1"

    def test_unknown_format(self, client: TestClient, admin_headers) -> None:
        response = client.get("/v1/audit-logs?format=xml", headers=admin_headers)
        assert response.status_code == 400

    def test_stats(self, client: TestClient, admin_headers) -> None:
        post_log(client, admin_headers, action="user_login")
        stats = client.get("/v1/audit-logs/stats", headers=admin_headers).json()
        assert stats["total"] == 1
        assert stats["top_actions"] == {"user_login": 1}


class TestClearAuditLogs:
    def test_clear_all(self, client: TestClient, admin_headers) -> None:
        post_log(client, admin_headers, action="a")
        post_log(client, admin_headers, action="b")

        body = client.delete("/v1/audit-logs", headers=admin_headers).json()

        assert body["removed"] == 2
        assert client.get("/v1/audit-logs", headers=admin_headers).json() == []

    def test_clear_older_than(self, client: TestClient, admin_headers) -> None:
        post_log(client, admin_headers, action="recent")

        body = client.delete("/v1/audit-logs?olderThanDays=30", headers=admin_headers).json()

        assert body["removed"] == 0
        assert body["olderThanDays"] == 30
        actions = [e["action"] for e in client.get("/v1/audit-logs", headers=admin_headers).json()]
        assert actions == ["audit_logs_cleaned", "recent"]

    def test_zero_days_clears_all(self, client: TestClient, admin_headers) -> None:
        post_log(client, admin_headers, action="a")

        body = client.delete("/v1/audit-logs?olderThanDays=0", headers=admin_headers).json()

        assert body["message"] == "All audit logs cleared"
        assert body["removed"] == 1
        assert client.get("/v1/audit-logs", headers=admin_headers).json() == []

    def test_negative_days_rejected(self, client: TestClient, admin_headers) -> None:
        response = client.delete("/v1/audit-logs?olderThanDays=-1", headers=admin_headers)
        assert response.status_code == 400

    def test_manager_may_not_clear(self, client: TestClient, make_token) -> None:
        headers = {"Authorization": f"Bearer {make_token(sub='m-1', role='manager')}"}
        assert client.delete("/v1/audit-logs", headers=headers).status_code == 403
