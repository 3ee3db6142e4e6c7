from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from sites import indexes


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("ICON_API", "ADMIN_PASSWORD_HASH", "JWT_ALG", "ACCESS_TOKEN_EXPIRE_MIN"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ADMIN_USERNAME", "admin")
    monkeypatch.setenv("ADMIN_PASSWORD", "s3cret-pass")
    monkeypatch.setenv("JWT_SECRET", "test-secret-for-jwt-signing-0123456789")


@pytest.fixture(autouse=True)
def index_batch():
    """Keep index maintenance off the real pool and start every test unchecked."""
    indexes.reset()
    with patch("core.db.execute_batch", new=AsyncMock(return_value=None)) as mock_batch:
        yield mock_batch
    indexes.reset()


@pytest.fixture
def client():
    # No context manager: the lifespan (and its DB pool) is not started.
    from main import app

    return TestClient(app)


@pytest.fixture
def admin_headers(client):
    response = client.post("/api/login", json={"username": "admin", "password": "s3cret-pass"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
