"""Shared fixtures.

Every test gets its own SQLite file under tmp_path and an app built by create_app()
with a controllable clock, so token expiry can be tested without sleeping.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict

import pytest
from fastapi.testclient import TestClient

from treasurer_dashboard.api.server import create_app
from treasurer_dashboard.config import Config

TEST_SECRET = "test-secret-not-for-production-use-0123456789"


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def cfg(tmp_path) -> Config:
    return Config(
        DB_DSN=str(tmp_path / "treasurer_test.sqlite"),
        AUTH_JWT_SECRET=TEST_SECRET,
        AUTH_BOOTSTRAP_ADMIN_USERNAME=None,
        AUTH_BOOTSTRAP_ADMIN_PASSWORD=None,
        API_HOST="127.0.0.1",
        API_PORT=3000,
        CORS_ALLOW_ORIGINS="*",
    )


@pytest.fixture
def app(cfg, clock):
    return create_app(cfg, clock=clock)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


def register(client: TestClient, username: str, password: str = "pw-123456", role: str = "member"):
    return client.post(
        "/register",
        json={"username": username, "password": password, "role": role},
    )


def login_token(client: TestClient, username: str, password: str = "pw-123456") -> str:
    resp = client.post("/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(client) -> Dict[str, str]:
    assert register(client, "treasurer", role="admin").status_code == 201
    return bearer(login_token(client, "treasurer"))


@pytest.fixture
def member_headers(client) -> Dict[str, str]:
    assert register(client, "member1", role="member").status_code == 201
    return bearer(login_token(client, "member1"))
