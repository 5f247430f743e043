from __future__ import annotations

import pytest

from conftest import USER_EMAIL, login, user_id


def test_health_and_root(client):
    assert client.get("/api/health").json()["status"] == "ok"
    assert "message" in client.get("/").json()


def test_register_then_login_and_profile(client):
    resp = client.post(
        "/api/users/register",
        json={"username": "newbie", "email": "New@Example.com", "password": "secret1"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert set(body) == {"id", "username", "email", "createdAt"}

    headers = login(client, "new@example.com", "secret1")
    me = client.get("/api/users/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["username"] == "newbie"
    assert "passwordHash" not in me.json()
    assert me.json()["lastLoginAt"]


def test_register_rejects_duplicates_and_bad_input(client):
    dup = client.post("/api/users/register", json={"username": "x", "email": USER_EMAIL.upper(), "password": "secret1"})
    assert dup.status_code == 400
    assert dup.json() == {"error": "User already exists with this email"}

    missing = client.post("/api/users/register", json={"email": "a@b.com"})
    assert missing.status_code == 400

    short = client.post("/api/users/register", json={"username": "x", "email": "a@b.com", "password": "123"})
    assert short.status_code == 400


def test_login_failures(client):
    assert client.post("/api/users/login", json={"email": USER_EMAIL}).status_code == 400
    bad = client.post("/api/users/login", json={"email": USER_EMAIL, "password": "wrong"})
    assert bad.status_code == 401
    assert bad.json()["error"] == "Invalid credentials"


def test_login_records_activity(client, store):
    login(client, USER_EMAIL, "password123")
    uid = user_id(store, USER_EMAIL)
    actions = [a["actionType"] for a in store.get("activities").filter({"userId": uid}).value()]
    assert "login" in actions


def test_me_requires_valid_token(client):
    assert client.get("/api/users/me").status_code == 401
    resp = client.get("/api/users/me", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid or expired token"}


def test_update_profile_merges_preferences(client, user_headers):
    client.put("/api/users/me", json={"preferences": {"seat": "window"}}, headers=user_headers)
    resp = client.put("/api/users/me", json={"username": "traveler", "preferences": {"meal": "veg"}}, headers=user_headers)
    assert resp.status_code == 200
    assert resp.json()["username"] == "traveler"
    assert resp.json()["preferences"] == {"seat": "window", "meal": "veg"}


def test_logout_revokes_session(client, user_headers):
    assert client.post("/api/users/logout", headers=user_headers).status_code == 200
    assert client.get("/api/users/me", headers=user_headers).status_code == 401


def test_user_bookings_join_trip_fields(client, store, user_headers, admin_headers):
    uid = user_id(store, USER_EMAIL)
    store.get("bookings").push({"id": "b1", "userId": uid, "tripId": "trip1", "status": "pending"})
    store.get("bookings").push({"id": "b2", "userId": uid, "tripId": "gone", "status": "pending"}).write()

    resp = client.get(f"/api/users/{uid}/bookings", headers=user_headers)
    assert resp.status_code == 200
    by_id = {b["id"]: b for b in resp.json()}
    assert by_id["b1"]["destination"] == "Hawaii"
    assert by_id["b2"]["destination"] == "Unknown Destination"

    assert client.get(f"/api/users/{uid}/bookings", headers=admin_headers).status_code == 200


def test_user_bookings_of_someone_else_is_unauthorized(client, store, manager_headers):
    uid = user_id(store, USER_EMAIL)
    assert client.get(f"/api/users/{uid}/bookings", headers=manager_headers).status_code == 401


def test_deleted_user_token_returns_404(client, store, user_headers):
    store.get("users").remove({"email": USER_EMAIL}).write()
    resp = client.get("/api/users/me", headers=user_headers)
    assert resp.status_code == 404


def test_login_is_rate_limited(client, monkeypatch):
    from vacations_api.core import config as core_config

    monkeypatch.setenv("LOGIN_RATE_LIMIT", "2")
    core_config.get_settings.cache_clear()
    for _ in range(2):
        client.post("/api/users/login", json={"email": USER_EMAIL, "password": "wrong"})
    resp = client.post("/api/users/login", json={"email": USER_EMAIL, "password": "wrong"})
    assert resp.status_code == 429
    assert int(resp.headers["retry-after"]) >= 1
    assert resp.json() == {"error": "Too many attempts. Please try again shortly."}


def test_non_string_credentials_are_rejected(client):
    register = client.post("/api/users/register", json={"username": "x", "email": 123, "password": "secret1"})
    assert register.status_code == 400
    login_resp = client.post("/api/users/login", json={"email": 123, "password": "password123"})
    assert login_resp.status_code == 400
    assert "error" in login_resp.json()


def test_attempt_window_reopens_after_expiry():
    from vacations_api.core.rate_limiter import AttemptCounter, AttemptLimitExceeded

    counter = AttemptCounter()
    assert counter.hit("login:1.2.3.4", limit=2, window_seconds=60, now=0) == 1
    assert counter.hit("login:1.2.3.4", limit=2, window_seconds=60, now=10) == 0
    with pytest.raises(AttemptLimitExceeded) as excinfo:
        counter.hit("login:1.2.3.4", limit=2, window_seconds=60, now=15)
    assert excinfo.value.retry_after == 45
    assert counter.hit("login:5.6.7.8", limit=2, window_seconds=60, now=15) == 1
    assert counter.hit("login:1.2.3.4", limit=2, window_seconds=60, now=60) == 1
