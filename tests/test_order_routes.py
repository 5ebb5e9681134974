"""Orders routes: bearer-authenticated order placement and reads.

Invariants:
    - POST /orders returns {orderId, total} with the server-computed total
    - Without a bearer token nothing is written and the answer is 401
    - Malformed input is 400, persistence failure is 500, both write nothing
    - Users only ever see their own orders
"""

from sqlalchemy.exc import OperationalError

from models.order import Order, OrderItem
from services import order_ledger

DIRECT = {"productId": "1", "name": "Direct", "unitPrice": 5000, "quantity": 2}


def test_place_order_returns_server_total(client, amy):
    res = client.post("/orders", json={"items": [DIRECT]}, headers=amy["headers"])
    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 10000
    assert isinstance(body["orderId"], int)


def test_caller_supplied_total_is_ignored(client, amy):
    payload = {"items": [dict(DIRECT, lineTotal=1)], "total": 1}
    res = client.post("/orders", json=payload, headers=amy["headers"])
    assert res.json()["total"] == 10000


def test_unauthenticated_order_is_401_and_writes_nothing(client, db):
    res = client.post("/orders", json={"items": [DIRECT]})
    assert res.status_code == 401
    assert db.query(Order).count() == 0
    assert db.query(OrderItem).count() == 0


def test_invalid_token_is_401(client, db):
    res = client.post("/orders", json={"items": [DIRECT]}, headers={"Authorization": "Bearer forged"})
    assert res.status_code == 401
    assert db.query(Order).count() == 0


def test_empty_order_is_400(client, db, amy):
    res = client.post("/orders", json={"items": []}, headers=amy["headers"])
    assert res.status_code == 400
    assert res.json()["code"] == "VALIDATION_ERROR"
    assert db.query(Order).count() == 0


def test_bad_line_is_400_and_writes_nothing(client, db, amy):
    items = [DIRECT, dict(DIRECT, productId="2", quantity=0)]
    res = client.post("/orders", json={"items": items}, headers=amy["headers"])
    assert res.status_code == 400
    assert db.query(Order).count() == 0


def test_persistence_failure_is_500_and_writes_nothing(client, db, amy, monkeypatch):
    real_write_line = order_ledger._write_line
    calls = []

    def flaky(session, order, line):
        calls.append(line)
        if len(calls) == 2:
            raise OperationalError("INSERT INTO order_items", {}, Exception("disk full"))
        return real_write_line(session, order, line)

    monkeypatch.setattr(order_ledger, "_write_line", flaky)

    items = [DIRECT, dict(DIRECT, productId="2")]
    res = client.post("/orders", json={"items": items}, headers=amy["headers"])
    assert res.status_code == 500
    assert res.json()["code"] == "PERSISTENCE_ERROR"
    assert db.query(Order).count() == 0
    assert db.query(OrderItem).count() == 0


def test_order_detail_has_snapshotted_lines(client, amy):
    created = client.post("/orders", json={"items": [DIRECT]}, headers=amy["headers"]).json()

    res = client.get(f"/orders/{created['orderId']}", headers=amy["headers"])
    assert res.status_code == 200
    order = res.json()
    assert order["total_amount"] == 10000
    assert order["items"] == [{
        "product_id": "1", "product_name": "Direct", "unit_price": 5000, "quantity": 2, "line_total": 10000,
    }]


def test_other_users_order_is_not_visible(client, amy, bob):
    created = client.post("/orders", json={"items": [DIRECT]}, headers=amy["headers"]).json()

    assert client.get(f"/orders/{created['orderId']}", headers=bob["headers"]).status_code == 404
    assert client.get("/orders", headers=bob["headers"]).json()["total"] == 0


def test_list_my_orders(client, amy):
    for qty in (1, 2):
        client.post("/orders", json={"items": [dict(DIRECT, quantity=qty)]}, headers=amy["headers"])

    res = client.get("/orders", params={"page": 1, "page_size": 10}, headers=amy["headers"])
    assert res.status_code == 200
    page = res.json()
    assert page["total"] == 2
    assert [o["total_amount"] for o in page["items"]] == [10000, 5000]
