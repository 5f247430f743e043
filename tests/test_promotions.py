from __future__ import annotations

from datetime import datetime, timezone

import pytest

from vacations_api.domain.promotions import derive_status, discount_for, ineligibility_reason


NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "start,end,expected",
    [
        ("2025-06-01", "2025-06-30", "active"),
        ("2025-07-01", "2025-07-31", "upcoming"),
        ("2025-05-01", "2025-05-31", "expired"),
        ("2025-06-01", "2025-06-15", "active"),
    ],
)
def test_derive_status(start, end, expected):
    assert derive_status(start, end, NOW) == expected


def test_discount_is_capped():
    assert discount_for({"discountType": "percentage", "discountValue": 10}, 200) == 20
    assert discount_for({"discountType": "fixed", "discountValue": 500}, 200) == 200


def test_ineligibility_reasons():
    promo = {"status": "active", "eligibleDestinations": ["Hawaii"], "minBookingValue": 500}
    assert ineligibility_reason(promo, "hawaii", 600) is None
    assert "destination" in ineligibility_reason(promo, "Denver", 600)
    assert "Minimum" in ineligibility_reason(promo, "Hawaii", 100)
    assert "expired" in ineligibility_reason({**promo, "status": "expired"}, "Hawaii", 600)


def _promo(**overrides):
    payload = {
        "code": "fall10",
        "description": "Fall deal",
        "discountType": "fixed",
        "discountValue": 50,
        "startDate": "2020-01-01",
        "endDate": "2099-12-31",
    }
    payload.update(overrides)
    return payload


def test_public_reads_and_validate(client):
    promos = client.get("/api/promotions").json()
    assert [p["code"] for p in promos] == ["SUMMER25"]
    assert client.get("/api/promotions", params={"status": "expired"}).json() == []

    assert client.get("/api/promotions/code/summer25").json()["code"] == "SUMMER25"
    assert client.get("/api/promotions/code/NOPE").status_code == 404

    ok = client.post("/api/promotions/validate", json={"code": "SUMMER25", "destination": "Cancun", "totalPrice": 1000})
    assert ok.status_code == 200
    assert ok.json()["valid"] is True
    assert ok.json()["discountAmount"] == 250

    assert client.post("/api/promotions/validate", json={"code": "NOPE"}).status_code == 404
    low = client.post("/api/promotions/validate", json={"code": "SUMMER25", "totalPrice": 100})
    assert low.status_code == 400


def test_admin_crud(client, user_headers, admin_headers):
    assert client.post("/api/promotions", json=_promo(), headers=user_headers).status_code == 403
    assert client.post("/api/promotions", json=_promo(discountType="bogus"), headers=admin_headers).status_code == 400
    assert client.post("/api/promotions", json={"code": "X"}, headers=admin_headers).status_code == 400

    created = client.post("/api/promotions", json=_promo(), headers=admin_headers)
    assert created.status_code == 201
    promo = created.json()
    assert promo["code"] == "FALL10"
    assert promo["status"] == "active"
    assert client.post("/api/promotions", json=_promo(code="FALL10"), headers=admin_headers).status_code == 409

    updated = client.put(
        f"/api/promotions/{promo['id']}",
        json={"code": "winter5", "startDate": "2098-01-01", "status": "active"},
        headers=admin_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["code"] == "WINTER5"
    assert updated.json()["status"] == "upcoming"

    deleted = client.delete(f"/api/promotions/{promo['id']}", headers=admin_headers)
    assert "message" in deleted.json()
    assert client.delete(f"/api/promotions/{promo['id']}", headers=admin_headers).status_code == 404
