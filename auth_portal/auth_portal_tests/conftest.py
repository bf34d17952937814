import pytest
from fastapi.testclient import TestClient

from auth_portal.auth_portal.auth_service.auth import hash_password
from auth_portal.auth_portal.auth_service.config import Settings
from auth_portal.auth_portal.auth_service.db import Database
from auth_portal.auth_portal.auth_service.main import create_app
from auth_portal.auth_portal.auth_service.models import User

TEST_ROUNDS = 1000


def make_settings(tmp_path, **overrides):
    values = {
        "DATABASE_URL": f"sqlite:///{tmp_path}/test.db",
        "LOG_DIR": str(tmp_path / "logs"),
        "AUTH_SECRET": "test-secret",
        "PASSWORD_HASH_ROUNDS": TEST_ROUNDS,
        "GITHUB_ID": "github-client-id",
        "GITHUB_SECRET": "github-client-secret",
        "GOOGLE_CLIENT_ID": "google-client-id",
        "GOOGLE_CLIENT_SECRET": "google-client-secret",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def database(settings):
    database = Database(settings.DATABASE_URL)
    database.init_db()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make_user(email="alice@example.com", password="correct-horse", name="Alice"):
        user = User(
            name=name,
            email=email,
            password=hash_password(password, TEST_ROUNDS) if password is not None else None,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


def sign_in(client, email="alice@example.com", password="correct-horse"):
    """Post credentials and return the redirect response."""
    return client.post(
        "/api/auth/callback/credentials",
        data={"email": email, "password": password},
        follow_redirects=False,
    )
