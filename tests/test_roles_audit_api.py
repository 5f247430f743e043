from __future__ import annotations

from conftest import ADMIN_EMAIL, MANAGER_EMAIL, USER_EMAIL, user_id


def test_role_catalogue_access(client, user_headers, manager_headers, admin_headers):
    assert client.get("/api/roles/permissions", headers=user_headers).status_code == 403
    assert len(client.get("/api/roles/permissions", headers=manager_headers).json()) == 10
    assert client.get("/api/roles", headers=manager_headers).status_code == 403

    roles = client.get("/api/roles", headers=admin_headers).json()
    assert [r["name"] for r in roles] == ["customer", "agent", "supervisor", "admin", "system"]
    assert client.get("/api/roles/4", headers=admin_headers).json()["name"] == "admin"
    assert client.get("/api/roles/99", headers=admin_headers).status_code == 404


def test_effective_role_follows_account_role(client, store, user_headers, admin_headers):
    uid = user_id(store, USER_EMAIL)
    mine = client.get(f"/api/roles/users/{uid}", headers=user_headers).json()
    assert mine["role"]["name"] == "customer"

    manager = client.get(f"/api/roles/users/{user_id(store, MANAGER_EMAIL)}", headers=admin_headers).json()
    assert manager["role"]["name"] == "supervisor"

    other = user_id(store, ADMIN_EMAIL)
    assert client.get(f"/api/roles/users/{other}", headers=user_headers).status_code == 403


def test_assign_role_and_check_permission(client, store, user_headers, admin_headers):
    uid = user_id(store, USER_EMAIL)
    before = client.get(f"/api/roles/users/{uid}/has-permission/delete_booking", headers=user_headers)
    assert before.json() == {"hasPermission": False}

    assert client.post(f"/api/roles/users/{uid}", json={}, headers=admin_headers).status_code == 400
    assert client.post(f"/api/roles/users/{uid}", json={"roleId": "99"}, headers=admin_headers).status_code == 404
    assert client.post("/api/roles/users/ghost", json={"roleId": "3"}, headers=admin_headers).status_code == 404
    assert client.post(f"/api/roles/users/{uid}", json={"roleId": "3"}, headers=user_headers).status_code == 403

    assigned = client.post(f"/api/roles/users/{uid}", json={"roleId": "3"}, headers=admin_headers)
    assert assigned.status_code == 200
    client.post(f"/api/roles/users/{uid}", json={"roleId": "3"}, headers=admin_headers)
    assert len(store.get("roleAssignments").filter({"userId": uid}).value()) == 1

    after = client.get(f"/api/roles/users/{uid}/has-permission/delete_booking", headers=user_headers)
    assert after.json() == {"hasPermission": True}
    unknown = client.get(f"/api/roles/users/{uid}/has-permission/fly_plane", headers=user_headers)
    assert unknown.status_code == 404


def test_expired_assignment_is_ignored(client, store, user_headers):
    uid = user_id(store, USER_EMAIL)
    store.get("roleAssignments").push(
        {"userId": uid, "roleId": "4", "assignedAt": "2020-01-01T00:00:00Z", "assignedBy": "x",
         "expiresAt": "2020-06-01T00:00:00Z"}
    ).write()
    assert client.get(f"/api/roles/users/{uid}", headers=user_headers).json()["role"]["name"] == "customer"


def test_audit_log_and_search(client, store, user_headers, manager_headers):
    uid = user_id(store, USER_EMAIL)
    assert client.post("/api/audit", json={"action": "view"}, headers=user_headers).status_code == 400

    for resource_id in ("b1", "b2"):
        resp = client.post(
            "/api/audit",
            json={"action": "view", "resource": "booking", "resourceId": resource_id, "details": {"via": "test"}},
            headers={**user_headers, "User-Agent": "pytest-agent"},
        )
        assert resp.status_code == 201
        assert resp.json()["userAgent"] == "pytest-agent"

    assert client.get("/api/audit", headers=user_headers).status_code == 403
    page = client.get("/api/audit", params={"userId": uid, "limit": 1, "offset": 1}, headers=manager_headers).json()
    assert page["total"] == 2
    assert page["limit"] == 1 and page["offset"] == 1
    assert len(page["logs"]) == 1

    by_resource = client.get("/api/audit/resource/booking/b1", headers=manager_headers).json()
    assert [e["resourceId"] for e in by_resource] == ["b1"]

    mine = client.get(f"/api/audit/user/{uid}", headers=user_headers).json()
    assert len(mine) == 2
    other = user_id(store, MANAGER_EMAIL)
    assert client.get(f"/api/audit/user/{other}", headers=user_headers).status_code == 403
