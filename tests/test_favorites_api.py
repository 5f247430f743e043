from __future__ import annotations


def test_add_list_remove_favorite(client, store, user_headers):
    created = client.post("/api/favorites", json={"tripId": "trip4"}, headers=user_headers)
    assert created.status_code == 201
    favorite = created.json()

    listed = client.get("/api/favorites", headers=user_headers).json()
    assert len(listed) == 1
    assert listed[0]["favoriteId"] == favorite["id"]
    assert listed[0]["trip"]["destination"] == "Denver"

    removed = client.delete(f"/api/favorites/{favorite['id']}", headers=user_headers)
    assert removed.json() == {"success": True}
    assert client.get("/api/favorites", headers=user_headers).json() == []

    actions = [a["actionType"] for a in store.get("activities").filter({"userId": favorite["userId"]}).value()]
    assert "add_favorite" in actions and "remove_favorite" in actions


def test_favorite_errors(client, user_headers, manager_headers):
    assert client.post("/api/favorites", json={"tripId": "trip1"}).status_code == 401
    assert client.post("/api/favorites", json={}, headers=user_headers).status_code == 400
    assert client.post("/api/favorites", json={"tripId": "nope"}, headers=user_headers).status_code == 404

    first = client.post("/api/favorites", json={"tripId": "trip1"}, headers=user_headers).json()
    assert client.post("/api/favorites", json={"tripId": "trip1"}, headers=user_headers).status_code == 409

    # Someone else's favorite looks missing.
    assert client.delete(f"/api/favorites/{first['id']}", headers=manager_headers).status_code == 404
