"""
HTTP tests for admin login, logout and the admin page guard.
"""

from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from gold2money.core.sessions import SessionStore


def get_admin_page(client):
    return client.get("/admin.html", follow_redirects=False)


class TestLogin:
    """Tests for POST /api/login."""

    def test_correct_password_grants_admin_page(self, client, settings):
        response = client.post("/api/login", json={"password": settings.admin_password})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Login successful."}
        assert settings.session_cookie_name in response.cookies

        page = get_admin_page(client)
        assert page.status_code == 200
        assert "Gold 2 Money Admin" in page.text
        assert page.headers["Cache-Control"] == "no-store"

    def test_wrong_password_is_rejected(self, client, settings):
        response = client.post("/api/login", json={"password": "guess"})

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid password."}
        assert settings.session_cookie_name not in response.cookies

        page = get_admin_page(client)
        assert page.status_code == 302
        assert page.headers["location"] == "/login.html"

    def test_missing_password_is_rejected(self, client):
        assert client.post("/api/login", json={}).status_code == 401

    def test_non_string_password_is_rejected(self, client):
        response = client.post("/api/login", json={"password": 123})

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid password."}

    def test_non_json_body_is_rejected(self, client, settings):
        response = client.post(
            "/api/login",
            content=f'{{"password": "{settings.admin_password}"}}',
            headers={"content-type": "text/plain"},
        )

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_invalid_json_body_is_rejected(self, client):
        response = client.post(
            "/api/login", content=b"{bad", headers={"content-type": "application/json"}
        )

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid password."}

    def test_json_array_body_is_rejected(self, client):
        assert client.post("/api/login", json=["password"]).status_code == 401

    def test_login_without_configured_secret_is_rejected(self, settings):
        from gold2money.main import create_app

        app = create_app(settings.model_copy(update={"admin_password": None}))
        with TestClient(app) as client:
            assert client.post("/api/login", json={}).status_code == 401
            assert client.post("/api/login", json={"password": ""}).status_code == 401

    def test_login_issues_a_fresh_session_id(self, client, settings):
        client.cookies.set(settings.session_cookie_name, "planted-session-id")

        response = client.post("/api/login", json={"password": settings.admin_password})

        assert response.cookies[settings.session_cookie_name] != "planted-session-id"

    def test_session_cookie_is_http_only(self, client, settings):
        response = client.post("/api/login", json={"password": settings.admin_password})

        set_cookie = response.headers["set-cookie"].lower()
        assert "httponly" in set_cookie
        assert "max-age=86400" in set_cookie
        assert "samesite=lax" in set_cookie

    def test_login_attempts_are_rate_limited(self, app):
        app.state.settings = app.state.settings.model_copy(update={"login_rate_limit": 3})

        with TestClient(app) as client:
            statuses = [
                client.post("/api/login", json={"password": "guess"}).status_code for _ in range(4)
            ]

        assert statuses == [401, 401, 401, 429]


class TestLogout:
    """Tests for POST /api/logout."""

    def test_logout_revokes_admin_access(self, client, settings):
        client.post("/api/login", json={"password": settings.admin_password})
        assert get_admin_page(client).status_code == 200

        response = client.post("/api/logout")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Logged out successfully."}
        assert get_admin_page(client).status_code == 302

    def test_old_cookie_is_useless_after_logout(self, client, settings):
        client.post("/api/login", json={"password": settings.admin_password})
        session_id = client.cookies.get(settings.session_cookie_name)

        client.post("/api/logout")
        client.cookies.set(settings.session_cookie_name, session_id)

        assert get_admin_page(client).status_code == 302

    def test_logout_without_session_succeeds(self, client):
        response = client.post("/api/logout")

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_logout_store_failure_returns_server_error(self, client, app, settings):
        failing_store = MagicMock(spec=SessionStore)
        failing_store.delete = AsyncMock(side_effect=ConnectionError("redis down"))
        app.state.sessions.store = failing_store
        client.cookies.set(settings.session_cookie_name, "some-session")

        response = client.post("/api/logout")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Could not log out."}


class TestPages:
    """Tests for the server-handled HTML pages."""

    def test_login_page_is_public(self, client):
        response = client.get("/login.html")

        assert response.status_code == 200
        assert "Admin Login" in response.text

    def test_admin_page_redirects_anonymous_users(self, client):
        response = get_admin_page(client)

        assert response.status_code == 302
        assert response.headers["location"] == "/login.html"

    def test_unknown_session_cookie_redirects(self, client, settings):
        client.cookies.set(settings.session_cookie_name, "forged")

        assert get_admin_page(client).status_code == 302

    def test_session_lookup_failure_fails_closed(self, client, app, settings):
        client.post("/api/login", json={"password": settings.admin_password})
        broken_store = MagicMock(spec=SessionStore)
        broken_store.get = AsyncMock(side_effect=ConnectionError("redis down"))
        app.state.sessions.store = broken_store

        assert get_admin_page(client).status_code == 302

    def test_index_is_served_from_public_directory(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert 'name="loanDocument"' in response.text

    def test_admin_page_is_not_in_public_directory(self, settings):
        assert not (settings.public_dir / "admin.html").exists()
        assert (settings.protected_dir / "admin.html").exists()

    def test_health_endpoint(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
