from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Makes the vacations_api package importable for local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from vacations_api.core import config as core_config  # noqa: E402
from vacations_api.core.rate_limiter import reset_limits  # noqa: E402
from vacations_api.repositories import json_storage  # noqa: E402

USER_EMAIL = "test@southwestvacations.com"
MANAGER_EMAIL = "manager@southwestvacations.com"
ADMIN_EMAIL = "admin@southwestvacations.com"


@pytest.fixture()
def data_file(tmp_path, monkeypatch):
    """Points the store at a fresh seeded JSON file and resets cached settings/store."""
    path = tmp_path / "db.json"
    monkeypatch.setenv("DATA_FILE", str(path))
    monkeypatch.setenv("SEED_ON_STARTUP", "true")
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.delenv("SMTP_HOST", raising=False)
    monkeypatch.delenv("LOGIN_RATE_LIMIT", raising=False)
    core_config.get_settings.cache_clear()
    json_storage.get_store.cache_clear()
    reset_limits()

    yield path

    core_config.get_settings.cache_clear()
    json_storage.get_store.cache_clear()
    reset_limits()


@pytest.fixture()
def store(data_file):
    return json_storage.get_store()


@pytest.fixture()
def client(data_file):
    from vacations_api.app import app

    with TestClient(app) as test_client:
        yield test_client


def login(client: TestClient, email: str, password: str) -> dict:
    resp = client.post("/api/users/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture()
def user_headers(client):
    return login(client, USER_EMAIL, "password123")


@pytest.fixture()
def manager_headers(client):
    return login(client, MANAGER_EMAIL, "password123")


@pytest.fixture()
def admin_headers(client):
    return login(client, ADMIN_EMAIL, "admin123")


def user_id(store, email: str) -> str:
    return store.get("users").find(lambda u: u.get("email") == email).value()["id"]
