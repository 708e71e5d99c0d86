"""Tests for the shared-password gate."""

from urllib.parse import parse_qs, urlparse

import pytest

from conftest import TEST_PASSWORD
from filterstudio.auth import AUTH_COOKIE_NAME, COOKIE_MAX_AGE, is_protected, safe_redirect_target, session_token


class TestHelpers:
    """Tests for the auth helper functions."""

    @pytest.mark.parametrize("path,expected", [
        ("/generate/chibi-sticker", True),
        ("/api/generate", True),
        ("/api/generate/chibi-sticker", True),
        ("/api/generate-chibi", True),
        ("/", False),
        ("/gallery", False),
        ("/api/gallery", False),
        ("/api/images/a.png", False),
        ("/login", False),
    ])
    def test_is_protected(self, path, expected):
        assert is_protected(path) is expected

    @pytest.mark.parametrize("target,expected", [
        ("/generate/chibi-sticker", "/generate/chibi-sticker"),
        ("https://evil.example.com", "/"),
        ("//evil.example.com", "/"),
        ("", "/"),
        (None, "/"),
    ])
    def test_safe_redirect_target(self, target, expected):
        assert safe_redirect_target(target) == expected

    def test_session_token_depends_on_password(self):
        assert session_token("a") == session_token("a")
        assert session_token("a") != session_token("b")


class TestGate:
    """Tests for the auth middleware."""

    def test_protected_page_redirects_to_login(self, client):
        response = client.get("/generate/chibi-sticker", follow_redirects=False)

        assert response.status_code == 303
        location = urlparse(response.headers["location"])
        assert location.path == "/login"
        assert parse_qs(location.query) == {"error": ["auth"], "redirect": ["/generate/chibi-sticker"]}

    def test_protected_api_returns_401(self, client, fake_generator):
        response = client.post("/api/generate/chibi-sticker")

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Authentication required"}
        fake_generator.generate.assert_not_called()

    def test_forged_cookie_rejected(self, client):
        client.headers["Cookie"] = f"{AUTH_COOKIE_NAME}=forged"

        assert client.post("/api/generate").status_code == 401

    def test_authenticated_page(self, auth_client):
        response = auth_client.get("/generate/chibi-sticker")

        assert response.status_code == 200
        assert "Chibi Sticker Pack" in response.text

    @pytest.mark.parametrize("path", ["/", "/gallery", "/login", "/api/gallery", "/api/styles"])
    def test_public_paths(self, client, path):
        assert client.get(path).status_code == 200


class TestLogin:
    """Tests for /api/auth/login and /api/auth/logout."""

    def test_missing_password(self, client):
        response = client.post("/api/auth/login", data={"redirect": "/"})

        assert response.status_code == 400
        assert response.text == "Password is required"

    def test_wrong_password(self, client):
        response = client.post(
            "/api/auth/login",
            data={"password": "nope", "redirect": "/generate/chibi-sticker"},
            follow_redirects=False,
        )

        assert response.status_code == 303
        location = urlparse(response.headers["location"])
        assert location.path == "/login"
        assert parse_qs(location.query)["error"] == ["invalid"]
        assert AUTH_COOKIE_NAME not in response.headers.get("set-cookie", "")

    def test_correct_password(self, client):
        """Test that a correct password sets the session cookie and redirects."""
        response = client.post(
            "/api/auth/login",
            data={"password": TEST_PASSWORD, "redirect": "/generate/chibi-sticker"},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/generate/chibi-sticker"
        cookie = response.headers["set-cookie"]
        assert cookie.startswith(f"{AUTH_COOKIE_NAME}={session_token(TEST_PASSWORD)}")
        assert "HttpOnly" in cookie
        assert "samesite=lax" in cookie.lower()
        assert f"Max-Age={COOKIE_MAX_AGE}" in cookie
        assert "Secure" not in cookie

    def test_open_redirect_blocked(self, client):
        response = client.post(
            "/api/auth/login",
            data={"password": TEST_PASSWORD, "redirect": "//evil.example.com"},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/"

    def test_logout(self, auth_client):
        response = auth_client.post("/api/auth/logout", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/login"
        assert response.headers["set-cookie"].startswith(f'{AUTH_COOKIE_NAME}=""')
