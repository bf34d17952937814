"""Tests for the edge gate redirect rule."""
import pytest

from auth_portal.auth_portal.auth_service.middleware import (
    API_AUTH,
    OTHER,
    PROTECTED,
    PUBLIC,
    classify_path,
    gate_decision,
    is_gated_path,
)

from .conftest import sign_in


@pytest.mark.parametrize("path,expected", [
    ("/api/auth/session", API_AUTH),
    ("/api/auth/callback/github", API_AUTH),
    ("/signin", PUBLIC),
    ("/signup", PUBLIC),
    ("/signin/extra", OTHER),
    ("/dashboard", PROTECTED),
    ("/dashboard/settings", PROTECTED),
    ("/", OTHER),
    ("/login", OTHER),
])
def test_classify_path(path, expected):
    assert classify_path(path) == expected


@pytest.mark.parametrize("path,logged_in,expected", [
    ("/api/auth/session", True, None),
    ("/api/auth/session", False, None),
    ("/signin", True, "/dashboard"),
    ("/signup", True, "/dashboard"),
    ("/signin", False, None),
    ("/dashboard", False, "/signin"),
    ("/dashboard/billing", False, "/signin"),
    ("/dashboard", True, None),
    ("/about", True, None),
    ("/about", False, None),
])
def test_gate_decision(path, logged_in, expected):
    assert gate_decision(path, logged_in) == expected


@pytest.mark.parametrize("path,gated", [
    ("/dashboard", True),
    ("/", True),
    ("/api/auth/session", True),
    ("/favicon.ico", False),
    ("/dashboard/logo.png", False),
    ("/_next/static/chunk", False),
])
def test_static_paths_are_not_gated(path, gated):
    assert is_gated_path(path) is gated


def test_dashboard_without_session_redirects_to_signin(client):
    response = client.get("/dashboard", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"].endswith("/signin")


def test_dashboard_with_invalid_token_redirects_to_signin(client, settings):
    client.cookies.set(settings.SESSION_COOKIE_NAME, "not-a-token")

    response = client.get("/dashboard", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"].endswith("/signin")


def test_dashboard_with_session_passes_through(client, make_user):
    user = make_user()
    assert sign_in(client).status_code == 302

    response = client.get("/dashboard", follow_redirects=False)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "authenticated"
    assert body["session"]["user"]["id"] == user.id


def test_signin_with_session_redirects_to_dashboard(client, make_user):
    make_user()
    sign_in(client)

    response = client.get("/signin?callbackUrl=/x", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"].endswith("/dashboard")
    assert "callbackUrl" not in response.headers["location"]


def test_signin_without_session_passes_through(client):
    response = client.get("/signin", follow_redirects=False)

    assert response.status_code != 302


@pytest.mark.parametrize("logged_in", [True, False])
def test_auth_api_always_passes_through(client, make_user, logged_in):
    if logged_in:
        make_user()
        sign_in(client)

    response = client.get("/api/auth/providers", follow_redirects=False)

    assert response.status_code == 200
    assert "credentials" in response.json()


def test_static_file_under_dashboard_is_not_redirected(client):
    response = client.get("/dashboard/logo.png", follow_redirects=False)

    assert response.status_code == 404
