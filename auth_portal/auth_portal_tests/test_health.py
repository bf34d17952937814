from unittest.mock import patch

from auth_portal.auth_portal.auth_service.db import Database


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_ready_when_database_connected(client):
    response = client.get("/ready")

    assert response.status_code == 200
    assert response.json()["database"] == "connected"


def test_not_ready_when_database_unreachable(client):
    with patch.object(Database, "check_connection", return_value=False):
        response = client.get("/ready")

    assert response.status_code == 503
    assert response.json()["status"] == "not_ready"
