"""Tests for lazily created, partially updated user settings."""
from tests.conftest import register_and_login

DEFAULTS = {
    "theme": "light",
    "notifications": True,
    "weatherLocation": "New York",
    "dashboardLayout": "grid",
}


def _prefs(body):
    return {k: body[k] for k in DEFAULTS}


class TestUserSettings:

    def test_first_read_creates_defaults(self, client, auth_headers):
        resp = client.get("/api/user/settings", headers=auth_headers)
        assert resp.status_code == 200
        assert _prefs(resp.json()) == DEFAULTS

    def test_second_read_returns_same_row(self, client, auth_headers):
        first = client.get("/api/user/settings", headers=auth_headers).json()
        second = client.get("/api/user/settings", headers=auth_headers).json()
        assert first == second

    def test_patch_merges_only_supplied_fields(self, client, auth_headers):
        client.patch("/api/user/settings", json={"weatherLocation": "Paris"}, headers=auth_headers)

        resp = client.patch("/api/user/settings", json={"theme": "dark"}, headers=auth_headers)
        assert resp.status_code == 200

        body = client.get("/api/user/settings", headers=auth_headers).json()
        assert body["theme"] == "dark"
        assert body["weatherLocation"] == "Paris"
        assert body["notifications"] is True
        assert body["dashboardLayout"] == "grid"

    def test_patch_before_first_read_uses_defaults_for_missing_fields(self, client, auth_headers):
        resp = client.patch("/api/user/settings", json={"notifications": False}, headers=auth_headers)
        assert resp.status_code == 200
        assert _prefs(resp.json()) == {**DEFAULTS, "notifications": False}

    def test_patch_accepts_snake_case(self, client, auth_headers):
        resp = client.patch("/api/user/settings", json={"dashboard_layout": "list"}, headers=auth_headers)
        assert resp.json()["dashboardLayout"] == "list"

    def test_invalid_theme_rejected(self, client, auth_headers):
        resp = client.patch("/api/user/settings", json={"theme": "neon"}, headers=auth_headers)
        assert resp.status_code == 422

    def test_settings_are_per_user(self, client):
        alice = register_and_login(client, "alice@example.com")
        bob = register_and_login(client, "bob@example.com")
        client.patch("/api/user/settings", json={"theme": "dark"}, headers=alice)

        assert client.get("/api/user/settings", headers=bob).json()["theme"] == "light"

    def test_requires_auth(self, client):
        assert client.get("/api/user/settings").status_code == 401
        assert client.patch("/api/user/settings", json={"theme": "dark"}).status_code == 401
