from __future__ import annotations

import pytest

from conftest import USER_EMAIL, user_id
from vacations_api.domain.bookings import can_transition


def _booking_payload(**overrides):
    payload = {
        "tripId": "trip2",
        "fullName": "Test User",
        "email": USER_EMAIL,
        "startDate": "2025-07-15",
        "travelers": 2,
        "tripType": "roundtrip",
    }
    payload.update(overrides)
    return payload


def _create(client, headers, **overrides):
    resp = client.post("/api/bookings", json=_booking_payload(**overrides), headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_booking_persists_and_is_retrievable(client, store, user_headers):
    booking = _create(client, user_headers)

    assert booking["status"] == "pending"
    assert booking["totalPrice"] == 899 * 2
    assert booking["confirmationCode"].startswith("SW")
    assert booking["confirmedAt"] == ""
    assert booking["userId"] == user_id(store, USER_EMAIL)

    fetched = client.get(f"/api/bookings/{booking['id']}", headers=user_headers)
    assert fetched.status_code == 200
    assert fetched.json()["id"] == booking["id"]

    actions = [a["actionType"] for a in store.get("activities").filter({"userId": booking["userId"]}).value()]
    assert "complete_booking" in actions


def test_create_booking_validation(client, user_headers):
    assert client.post("/api/bookings", json=_booking_payload()).status_code == 401
    missing = client.post("/api/bookings", json={"tripId": "trip1"}, headers=user_headers)
    assert missing.status_code == 400
    assert client.post("/api/bookings", json=_booking_payload(tripId="nope"), headers=user_headers).status_code == 404
    assert client.post("/api/bookings", json=_booking_payload(travelers=0), headers=user_headers).status_code == 400


def test_create_booking_with_discount_code(client, user_headers):
    booking = _create(client, user_headers, discountCode="summer25")
    assert booking["discountCode"] == "SUMMER25"
    assert booking["discountAmount"] == pytest.approx(899 * 2 * 0.25)
    assert booking["totalPrice"] == pytest.approx(899 * 2 * 0.75)

    wrong_place = client.post(
        "/api/bookings", json=_booking_payload(tripId="trip3", discountCode="SUMMER25"), headers=user_headers
    )
    assert wrong_place.status_code == 400
    unknown = client.post("/api/bookings", json=_booking_payload(discountCode="NOPE"), headers=user_headers)
    assert unknown.status_code == 400


def test_list_is_for_employees_with_filters(client, user_headers, manager_headers):
    first = _create(client, user_headers, fullName="Alice Smith", startDate="2025-06-15")
    _create(client, user_headers, fullName="Bob Jones", startDate="2025-08-15")

    assert client.get("/api/bookings", headers=user_headers).status_code == 403
    everything = client.get("/api/bookings", headers=manager_headers).json()
    assert len(everything) == 2

    found = client.get("/api/bookings", params={"search": "alice"}, headers=manager_headers).json()
    assert [b["id"] for b in found] == [first["id"]]
    by_code = client.get("/api/bookings", params={"search": first["confirmationCode"].lower()}, headers=manager_headers)
    assert [b["id"] for b in by_code.json()] == [first["id"]]

    window = client.get("/api/bookings", params={"endDate": "2025-07-01"}, headers=manager_headers).json()
    assert [b["fullName"] for b in window] == ["Alice Smith"]

    by_start = client.get("/api/bookings", params={"sortBy": "startDate", "sortOrder": "asc", "limit": 1},
                          headers=manager_headers).json()
    assert [b["fullName"] for b in by_start] == ["Alice Smith"]


def test_other_users_cannot_read_booking(client, manager_headers, user_headers):
    booking = _create(client, manager_headers)
    assert client.get(f"/api/bookings/{booking['id']}", headers=user_headers).status_code == 403
    assert client.get("/api/bookings/missing", headers=user_headers).status_code == 404


def test_confirm_then_cancel_notifies_owner(client, store, user_headers, manager_headers):
    booking = _create(client, user_headers)

    confirmed = client.put(f"/api/bookings/{booking['id']}/status", json={"status": "confirmed"}, headers=manager_headers)
    assert confirmed.status_code == 200
    assert confirmed.json()["confirmedAt"]

    cancelled = client.put(f"/api/bookings/{booking['id']}/status", json={"status": "cancelled"}, headers=user_headers)
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"
    assert cancelled.json()["confirmedAt"] == confirmed.json()["confirmedAt"]

    titles = [n["title"] for n in store.get("notifications").filter({"userId": booking["userId"]}).value()]
    assert "Booking confirmed" in titles
    assert "Booking cancelled" in titles

    again = client.put(f"/api/bookings/{booking['id']}/status", json={"status": "pending"}, headers=manager_headers)
    assert again.status_code == 409


def test_status_change_rules_for_customers(client, user_headers, manager_headers):
    booking = _create(client, user_headers)
    bad = client.put(f"/api/bookings/{booking['id']}/status", json={"status": "lost"}, headers=manager_headers)
    assert bad.status_code == 400
    self_confirm = client.put(f"/api/bookings/{booking['id']}/status", json={"status": "confirmed"}, headers=user_headers)
    assert self_confirm.status_code == 403

    other = _create(client, manager_headers)
    foreign = client.put(f"/api/bookings/{other['id']}/status", json={"status": "cancelled"}, headers=user_headers)
    assert foreign.status_code == 403


def test_update_ignores_protected_fields(client, user_headers):
    booking = _create(client, user_headers)
    resp = client.put(
        f"/api/bookings/{booking['id']}",
        json={"specialRequests": "Ocean view", "status": "confirmed", "userId": "someone", "id": "x"},
        headers=user_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["specialRequests"] == "Ocean view"
    assert body["status"] == "pending"
    assert body["id"] == booking["id"]
    assert body["userId"] == booking["userId"]


def test_delete_is_employee_only_and_audited(client, store, user_headers, manager_headers):
    booking = _create(client, user_headers)
    assert client.delete(f"/api/bookings/{booking['id']}", headers=user_headers).status_code == 403

    resp = client.delete(f"/api/bookings/{booking['id']}", headers=manager_headers)
    assert resp.status_code == 204
    assert client.delete(f"/api/bookings/{booking['id']}", headers=manager_headers).status_code == 404

    entries = store.get("auditLogs").filter({"resource": "booking", "resourceId": booking["id"]}).value()
    assert [e["action"] for e in entries] == ["delete"]


@pytest.mark.parametrize(
    "current,target,allowed",
    [
        ("pending", "confirmed", True),
        ("pending", "cancelled", True),
        ("confirmed", "pending", True),
        ("confirmed", "confirmed", True),
        ("cancelled", "pending", False),
        ("cancelled", "confirmed", False),
        ("cancelled", "cancelled", True),
    ],
)
def test_status_transitions(current, target, allowed):
    assert can_transition(current, target) is allowed


def test_create_ignores_client_pricing_fields(client, user_headers):
    booking = _create(client, user_headers, discountAmount=500, updatedAt="2000-01-01T00:00:00Z")
    assert "discountAmount" not in booking
    assert "updatedAt" not in booking
    assert booking["totalPrice"] == 899 * 2


def test_create_rejects_non_string_fields(client, user_headers):
    for overrides in ({"discountCode": 25}, {"startDate": 20250715}, {"fullName": ["Test"]}):
        resp = client.post("/api/bookings", json=_booking_payload(**overrides), headers=user_headers)
        assert resp.status_code == 400, overrides


def test_list_with_negative_limit_returns_all(client, store, user_headers, manager_headers):
    _create(client, user_headers)
    _create(client, user_headers)
    resp = client.get("/api/bookings", params={"limit": -1}, headers=manager_headers)
    assert len(resp.json()) == len(store.get("bookings").value())
