"""Shared fixtures: an app wired to a call-recording in-memory store."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from artoo.api.server import create_app
from artoo.config import ArtooConfig
from artoo.runtime import ArtooRuntime

from helpers import PASSWORD, USERNAME, SpyStore


@pytest.fixture
def store() -> SpyStore:
    return SpyStore()


@pytest.fixture
def runtime(store: SpyStore) -> ArtooRuntime:
    config = ArtooConfig.default()
    config.auth.jwt_secret = "test-secret"
    config.auth.credentials = {USERNAME: PASSWORD}
    return ArtooRuntime.bootstrap(config, store=store)


@pytest.fixture
def client(runtime: ArtooRuntime) -> TestClient:
    return TestClient(create_app(runtime))


@pytest.fixture
def auth_headers(client: TestClient) -> dict:
    resp = client.post("/api/auth/login", json={"username": USERNAME, "password": PASSWORD})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}
