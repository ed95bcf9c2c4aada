"""Shared fixtures: in-memory SQLite app client, auth helpers, fake sinks."""

import os
import uuid

# Must be set before any clubber module reads settings
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_PER_MINUTE"] = "1000/minute"
os.environ["API_KEY"] = "test-admin-key"
os.environ["ENVIRONMENT"] = "development"
os.environ["SENTRY_ENABLED"] = "false"
os.environ["STREAM_BASE_URL"] = "https://cdn.example.com/"
os.environ["STREAM_DEV_MOCK_URL"] = ""

import pytest
from fastapi.testclient import TestClient

ADMIN_HEADERS = {"X-API-Key": "test-admin-key"}


class RecordingSink:
    """Sink that keeps every chunk written to it."""

    def __init__(self):
        self.chunks: list[str] = []
        self.flushes = 0
        self.closed = False

    async def write(self, chunk: str) -> None:
        self.chunks.append(chunk)

    async def flush(self) -> None:
        self.flushes += 1

    def close(self) -> None:
        self.closed = True


class FailingSink(RecordingSink):
    """Sink whose transport is gone."""

    async def write(self, chunk: str) -> None:
        raise ConnectionResetError("client went away")


@pytest.fixture(scope="session")
def client():
    from clubber.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def hub(client):
    return client.app.state.notification_hub


def register_user(client) -> dict:
    username = f"user_{uuid.uuid4().hex[:10]}"
    response = client.post(
        "/api/v1/auth/register",
        json={"username": username, "password": "s3cret-pass"},
    )
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def auth_headers(client):
    body = register_user(client)
    return {"Authorization": f"Bearer {body['token']}"}


@pytest.fixture
def competition_tag():
    """Unique competition name so API tests don't see each other's matches."""
    return f"Cup {uuid.uuid4().hex[:8]}"
