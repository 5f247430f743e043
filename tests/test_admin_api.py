from __future__ import annotations

from datetime import datetime, timezone

from conftest import USER_EMAIL, login, user_id
from vacations_api.core.utils import now_iso
from vacations_api.services.admin_service import AdminService


def test_admin_routes_require_admin(client, user_headers, manager_headers):
    assert client.get("/api/admin/stats").status_code == 401
    assert client.get("/api/admin/stats", headers=user_headers).status_code == 403
    assert client.get("/api/admin/users", headers=manager_headers).status_code == 403


def test_stats(client, store, admin_headers):
    stamp = now_iso()
    bookings = store.get("bookings")
    bookings.push({"id": "b1", "tripId": "trip1", "status": "confirmed", "totalPrice": 100, "createdAt": stamp})
    bookings.push({"id": "b2", "tripId": "trip1", "status": "pending", "totalPrice": 50, "createdAt": stamp})
    bookings.push({"id": "b3", "tripId": "trip2", "status": "cancelled", "totalPrice": 25,
                   "createdAt": "2001-01-01T00:00:00Z"}).write()

    stats = client.get("/api/admin/stats", headers=admin_headers).json()
    assert stats["totalUsers"] == 3
    assert stats["activeUsers"] == 1
    assert stats["totalBookings"] == 3
    assert stats["revenueToday"] == 150
    assert stats["revenueThisMonth"] == 150
    assert stats["popularDestinations"][0] == {"tripId": "trip1", "destination": "Hawaii", "count": 2}
    assert stats["bookingsByStatus"] == {"confirmed": 1, "pending": 1, "cancelled": 1}
    assert stats["conversionRate"] == 3


def test_conversion_rate_is_bookings_per_trip_view(store):
    store.get("bookings").push({"id": "b1", "tripId": "trip1", "totalPrice": 10, "createdAt": now_iso()})
    for _ in range(2):
        store.get("activities").push({"id": "a", "userId": "u", "actionType": "view_trip", "timestamp": now_iso()})
    assert AdminService().stats()["conversionRate"] == 0.5


def test_week_starts_on_sunday(store):
    store.get("bookings").push({"id": "b", "totalPrice": 10, "createdAt": "2025-06-15T09:00:00Z"})
    store.get("bookings").push({"id": "c", "totalPrice": 5, "createdAt": "2025-06-14T09:00:00Z"})
    # 2025-06-18 is a Wednesday; the week began on Sunday the 15th.
    stats = AdminService().stats(now=datetime(2025, 6, 18, 12, tzinfo=timezone.utc))
    assert stats["revenueThisWeek"] == 10
    assert stats["revenueThisMonth"] == 15


def test_user_management_flow(client, store, admin_headers):
    created = client.post(
        "/api/admin/users",
        json={"username": "agent1", "email": "agent1@example.com", "password": "secret1", "role": "agent"},
        headers=admin_headers,
    )
    assert created.status_code == 201
    agent = created.json()
    assert agent["isEmployee"] is True and agent["isAdmin"] is False
    assert "passwordHash" not in agent

    dup = client.post(
        "/api/admin/users",
        json={"username": "again", "email": "agent1@example.com", "password": "secret1", "role": "agent"},
        headers=admin_headers,
    )
    assert dup.status_code == 409
    bad_role = client.post(
        "/api/admin/users",
        json={"username": "r", "email": "r@example.com", "password": "secret1", "role": "wizard"},
        headers=admin_headers,
    )
    assert bad_role.status_code == 400

    promoted = client.put(f"/api/admin/users/{agent['id']}", json={"role": "admin"}, headers=admin_headers)
    assert promoted.json()["isAdmin"] is True

    reset = client.post(f"/api/admin/users/{agent['id']}/reset-password", json={}, headers=admin_headers)
    temporary = reset.json()["temporaryPassword"]
    login(client, "agent1@example.com", temporary)

    client.post(f"/api/admin/users/{agent['id']}/reset-password", json={"newPassword": "brandnew"},
                headers=admin_headers)
    login(client, "agent1@example.com", "brandnew")

    users = client.get("/api/admin/users", headers=admin_headers).json()
    assert any(u["email"] == "agent1@example.com" for u in users)
    assert all("passwordHash" not in u for u in users)

    actions = [e["action"] for e in store.get("auditLogs").filter({"resourceId": agent["id"]}).value()]
    assert actions[:2] == ["create", "update"]


def test_delete_user_cascades(client, store, admin_headers, user_headers):
    uid = user_id(store, USER_EMAIL)
    client.post("/api/favorites", json={"tripId": "trip1"}, headers=user_headers)
    store.get("roleAssignments").push({"userId": uid, "roleId": "2"})
    store.get("twoFactorSetups").push({"userId": uid, "isEnabled": True}).write()

    assert client.delete("/api/admin/users/missing", headers=admin_headers).status_code == 404
    resp = client.delete(f"/api/admin/users/{uid}", headers=admin_headers)
    assert resp.status_code == 200

    for name in ("users", "favorites", "sessions", "roleAssignments", "twoFactorSetups"):
        assert store.get(name).filter(lambda r: r.get("userId", r.get("id")) == uid).value() == [], name
    assert client.get("/api/users/me", headers=user_headers).status_code == 401


def test_analytics_and_recent_bookings(client, store, admin_headers):
    uid = user_id(store, USER_EMAIL)
    for idx in range(25):
        store.get("bookings").push({
            "id": f"b{idx}",
            "userId": uid,
            "totalPrice": 10,
            "createdAt": f"2025-01-{idx + 1:02d}T00:00:00Z",
        })
    store.write()

    recent = client.get("/api/admin/bookings/recent", headers=admin_headers).json()
    assert len(recent) == 20
    assert recent[0]["id"] == "b24"

    analytics = client.get("/api/admin/analytics/users", headers=admin_headers).json()
    mine = next(row for row in analytics if row["userId"] == uid)
    assert mine["totalBookings"] == 25
    assert mine["totalSpent"] == 250


def test_suspended_user_loses_existing_sessions(client, store, admin_headers, user_headers):
    uid = user_id(store, USER_EMAIL)
    assert client.get("/api/users/me", headers=user_headers).status_code == 200

    resp = client.put(f"/api/admin/users/{uid}", json={"status": "suspended"}, headers=admin_headers)
    assert resp.status_code == 200
    assert store.get("sessions").filter({"userId": uid}).value() == []
    assert client.get("/api/users/me", headers=user_headers).status_code == 401


def test_inactive_account_is_refused_on_live_session(client, store, user_headers):
    store.get("users").find({"email": USER_EMAIL}).assign({"status": "inactive"}).write()
    resp = client.get("/api/users/me", headers=user_headers)
    assert resp.status_code == 403
    assert resp.json() == {"error": "Account is not active"}
