"""Favorites routes.

Invariants:
    - One row per (user, product); a duplicate add is 409
    - Removing a missing favorite is 404
    - Listing is per user, most recent first
"""

from models.favorite import Favorite


def test_add_and_list(client, amy):
    res = client.post("/favorites", json={"productId": "1"}, headers=amy["headers"])
    assert res.status_code == 200
    assert res.json()["message"]

    res = client.get("/favorites", headers=amy["headers"])
    assert res.json() == {"favorites": ["1"]}


def test_list_is_most_recent_first(client, amy):
    for pid in ("1", "2", "3"):
        client.post("/favorites", json={"productId": pid}, headers=amy["headers"])
    assert client.get("/favorites", headers=amy["headers"]).json()["favorites"] == ["3", "2", "1"]


def test_duplicate_add_is_conflict(client, db, amy):
    client.post("/favorites", json={"productId": "1"}, headers=amy["headers"])
    res = client.post("/favorites", json={"productId": "1"}, headers=amy["headers"])
    assert res.status_code == 409
    assert db.query(Favorite).count() == 1


def test_remove(client, amy):
    client.post("/favorites", json={"productId": "1"}, headers=amy["headers"])
    res = client.delete("/favorites/1", headers=amy["headers"])
    assert res.status_code == 200
    assert client.get("/favorites", headers=amy["headers"]).json() == {"favorites": []}


def test_remove_missing_is_404(client, amy):
    res = client.delete("/favorites/42", headers=amy["headers"])
    assert res.status_code == 404
    assert res.json()["message"] == "Favorite not found"


def test_favorites_are_per_user(client, amy, bob):
    client.post("/favorites", json={"productId": "1"}, headers=amy["headers"])
    assert client.get("/favorites", headers=bob["headers"]).json() == {"favorites": []}
    assert client.delete("/favorites/1", headers=bob["headers"]).status_code == 404


def test_favorites_require_auth(client):
    assert client.get("/favorites").status_code == 401
    assert client.post("/favorites", json={"productId": "1"}).status_code == 401
    assert client.delete("/favorites/1").status_code == 401


def test_add_requires_product_id(client, amy):
    res = client.post("/favorites", json={"productId": ""}, headers=amy["headers"])
    assert res.status_code == 400


def test_add_rejects_blank_product_id(client, db, amy):
    res = client.post("/favorites", json={"productId": "   "}, headers=amy["headers"])
    assert res.status_code == 400
    assert db.query(Favorite).count() == 0


def test_padded_product_id_is_normalized_on_add_and_remove(client, amy):
    client.post("/favorites", json={"productId": " 7"}, headers=amy["headers"])
    assert client.get("/favorites", headers=amy["headers"]).json() == {"favorites": ["7"]}

    assert client.post("/favorites", json={"productId": "7 "}, headers=amy["headers"]).status_code == 409
    res = client.delete("/favorites/%207", headers=amy["headers"])
    assert res.status_code == 200
    assert client.get("/favorites", headers=amy["headers"]).json() == {"favorites": []}
