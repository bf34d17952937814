"""Tests for the sign-in page form actions."""
from unittest.mock import Mock, patch
from urllib.parse import parse_qs, urlparse

import pytest
from sqlalchemy.exc import OperationalError

from auth_portal.auth_portal.auth_service.actions import (
    GENERIC_ERROR_MESSAGE,
    INVALID_CREDENTIALS_MESSAGE,
    do_credential_login,
    do_sign_out,
)
from auth_portal.auth_portal.auth_service.errors import CredentialsSignin, StoreUnavailable
from auth_portal.auth_portal.auth_service.orchestrator import AuthOrchestrator

from .conftest import sign_in

FIND_USER = "auth_portal.auth_portal.auth_service.authorizer.find_user_by_email"


def _orchestrator_raising(settings, exc):
    orchestrator = Mock(spec=AuthOrchestrator)
    orchestrator.settings = settings
    orchestrator.sign_in.side_effect = exc
    return orchestrator


def test_credential_login_success(settings, db, make_user):
    user = make_user()
    orchestrator = AuthOrchestrator(settings)

    result = do_credential_login({"email": "alice@example.com", "password": "correct-horse"}, orchestrator, db)

    assert result.error is None
    assert result.redirect_to == "/dashboard"
    assert result.sign_in.user.id == user.id
    assert result.sign_in.session_token


def test_credential_login_invalid_credentials(settings, db, make_user):
    make_user()
    orchestrator = AuthOrchestrator(settings)

    result = do_credential_login({"email": "alice@example.com", "password": "nope"}, orchestrator, db)

    assert result.error == INVALID_CREDENTIALS_MESSAGE
    assert result.sign_in is None


def test_credential_login_maps_credentials_error(settings):
    orchestrator = _orchestrator_raising(settings, CredentialsSignin())

    result = do_credential_login({"email": "a@b.c", "password": "x"}, orchestrator, Mock())

    assert result.error == "Invalid credentials."


def test_credential_login_maps_other_auth_errors_to_generic_message(settings):
    orchestrator = _orchestrator_raising(settings, StoreUnavailable())

    result = do_credential_login({"email": "a@b.c", "password": "x"}, orchestrator, Mock())

    assert result.error == GENERIC_ERROR_MESSAGE
    assert result.error_type == "StoreUnavailable"


def test_credential_login_reraises_unexpected_errors(settings):
    orchestrator = _orchestrator_raising(settings, RuntimeError("boom"))

    with pytest.raises(RuntimeError):
        do_credential_login({"email": "a@b.c", "password": "x"}, orchestrator, Mock())


def test_sign_out_redirects_to_login(settings):
    orchestrator = Mock(spec=AuthOrchestrator)
    orchestrator.settings = settings

    result = do_sign_out("token", orchestrator, Mock())

    assert result.redirect_to == "/login"
    orchestrator.sign_out.assert_called_once()


def test_credential_login_endpoint_with_form(client, settings, make_user):
    make_user()

    response = client.post(
        "/actions/credential-login",
        data={"email": "alice@example.com", "password": "correct-horse"},
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"
    assert client.cookies.get(settings.SESSION_COOKIE_NAME)


def test_credential_login_endpoint_with_json(client, make_user):
    make_user()

    response = client.post(
        "/actions/credential-login",
        json={"email": "alice@example.com", "password": "correct-horse"},
        follow_redirects=False,
    )

    assert response.status_code == 303


def test_credential_login_endpoint_returns_structured_error(client, make_user):
    make_user()

    response = client.post(
        "/actions/credential-login",
        json={"email": "alice@example.com", "password": "wrong"},
        follow_redirects=False,
    )

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials."}


def test_social_login_redirects_to_provider(client):
    response = client.post("/actions/social-login/github", follow_redirects=False)

    assert response.status_code == 303
    location = urlparse(response.headers["location"])
    assert location.netloc == "github.com"
    query = parse_qs(location.query)
    assert query["client_id"] == ["github-client-id"]
    assert query["state"] == [client.cookies.get("authjs.state")]


def test_social_login_unknown_provider(client):
    response = client.post("/actions/social-login/myspace", follow_redirects=False)

    assert response.status_code == 404


def test_sign_out_endpoint(client, settings, make_user):
    make_user()
    client.post(
        "/actions/credential-login",
        data={"email": "alice@example.com", "password": "correct-horse"},
        follow_redirects=False,
    )

    response = client.post("/actions/sign-out", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    assert client.cookies.get(settings.SESSION_COOKIE_NAME) is None


def test_credential_login_endpoint_store_failure_is_503(client, settings, make_user):
    make_user()
    failure = OperationalError("SELECT", {}, Exception("database is locked"))

    with patch(FIND_USER, side_effect=failure):
        response = client.post(
            "/actions/credential-login",
            json={"email": "alice@example.com", "password": "correct-horse"},
            follow_redirects=False,
        )

    assert response.status_code == 503
    assert response.json() == {"error": "Something went wrong."}
    assert client.cookies.get(settings.SESSION_COOKIE_NAME) is None


def test_credentials_callback_store_failure_redirects_with_error(client, settings, make_user):
    make_user()
    failure = OperationalError("SELECT", {}, Exception("database is locked"))

    with patch(FIND_USER, side_effect=failure):
        response = sign_in(client)

    assert response.status_code == 302
    assert response.headers["location"] == "/signin?error=StoreUnavailable"
    assert client.cookies.get(settings.SESSION_COOKIE_NAME) is None
