# tests/conftest.py
import os

# Must be set before healthtrack is imported: settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_TIMEZONE"] = "UTC"

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from healthtrack.main import app
from healthtrack.api.deps import get_now
from healthtrack.db.base import Base
from healthtrack.db.session import engine
from healthtrack.services.cache import query_cache

# A Monday
FIXED_NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _fresh_database():
    """
    Every test starts from empty tables and an empty query cache.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    query_cache.clear()
    yield
    app.dependency_overrides.clear()


class FakeClock:
    """
    Stands in for get_now. Move time by assigning to `now`.
    """
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    fake = FakeClock(FIXED_NOW)
    app.dependency_overrides[get_now] = fake
    return fake


@pytest.fixture
def client(clock):
    with TestClient(app) as c:
        yield c


def sign_up(client, email, password="secret123"):
    """Registers and logs in, returning ready-to-use auth headers."""
    r = client.post("/api/v1/auth/register", json={"email": email, "password": password})
    assert r.status_code == 201, r.text
    r = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return sign_up(client, "alice@example.com")


@pytest.fixture
def other_headers(client):
    return sign_up(client, "bob@example.com")
