"""Tests for the /v1/settings endpoints."""

from fastapi.testclient import TestClient


class TestAuthentication:
    def test_missing_token(self, client: TestClient) -> None:
        response = client.get("/v1/settings")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_invalid_token(self, client: TestClient) -> None:
        response = client.get("/v1/settings", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_unknown_role(self, client: TestClient, make_token) -> None:
        token = make_token(role="superuser")
        response = client.get("/v1/settings", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestGetSettings:
    def test_admin_reads_typed_values(self, client: TestClient, admin_headers) -> None:
        response = client.get("/v1/settings", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["sessionTimeout"] == 60
        assert body["maintenanceMode"] is False
        assert body["featureFlags"] == {
            "betaFeatures": False,
            "newDashboard": False,
            "advancedReports": False,
        }
        assert isinstance(body["allowedFileTypes"], list)
        assert response.headers["X-Cache"] == "MISS"
        assert "X-Settings-Last-Updated" in response.headers

    def test_second_read_is_cached(self, client: TestClient, admin_headers) -> None:
        client.get("/v1/settings?category=security", headers=admin_headers)
        response = client.get("/v1/settings?category=security", headers=admin_headers)
        assert response.headers["X-Cache"] == "HIT"
        assert set(response.json()) == {
            "sessionTimeout",
            "maxLoginAttempts",
            "enable2FA",
            "auditAllActions",
        }

    def test_user_may_read_safe_keys(self, client: TestClient, user_headers) -> None:
        response = client.get("/v1/settings?keys=siteTitle", headers=user_headers)
        assert response.status_code == 200
        assert list(response.json()) == ["siteTitle"]

    def test_user_may_not_read_everything(self, client: TestClient, user_headers) -> None:
        response = client.get("/v1/settings", headers=user_headers)
        assert response.status_code == 403
        assert response.json()["error"] == {
            "code": "FORBIDDEN",
            "message": "Admin access required",
        }

    def test_user_may_not_mix_in_unsafe_keys(self, client: TestClient, user_headers) -> None:
        response = client.get("/v1/settings?keys=siteTitle,smtpPassword", headers=user_headers)
        assert response.status_code == 403


class TestUpdateSettings:
    def test_partial_update(self, client: TestClient, admin_headers) -> None:
        response = client.put(
            "/v1/settings",
            json={"siteTitle": "Renamed", "sessionTimeout": 30, "nope": 1},
            headers=admin_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Settings updated successfully"
        assert sorted(body["updated"]) == ["sessionTimeout", "siteTitle"]
        assert body["skipped"] == ["nope"]

        after = client.get("/v1/settings", headers=admin_headers)
        assert after.headers["X-Cache"] == "MISS"
        assert after.json()["siteTitle"] == "Renamed"
        assert after.json()["sessionTimeout"] == 30

    def test_update_is_audited_and_tracked(self, client: TestClient, admin_headers) -> None:
        client.put("/v1/settings", json={"theme": "dark"}, headers=admin_headers)

        logs = client.get("/v1/audit-logs?action=settings_changed", headers=admin_headers).json()
        assert logs[0]["user_id"] == "admin-1"
        assert logs[0]["details"]["updated"] == ["theme"]

        history = client.get("/v1/data-history?table=settings&action=update", headers=admin_headers)
        item = history.json()["items"][0]
        assert item["changed_by"] == "admin-1"
        assert item["new_data"]["value"] == "dark"

    def test_requires_admin(self, client: TestClient, user_headers) -> None:
        response = client.put("/v1/settings", json={"siteTitle": "x"}, headers=user_headers)
        assert response.status_code == 403

    def test_body_must_be_object(self, client: TestClient, admin_headers) -> None:
        response = client.put("/v1/settings", json=["siteTitle"], headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"
