"""Auth routes: signup, login, me.

Invariants:
    - Signup returns the user and a bearer token together
    - Email is unique (case-insensitive, trimmed); a repeat signup is 409
    - Unknown account and wrong password are both 401 with distinct messages
    - Malformed payloads are 400
"""

from models.log import Log
from models.users import User


def test_signup_returns_user_and_token(client):
    res = client.post("/auth/signup", json={"name": "Amy", "email": "a@x.com", "password": "pass"})
    assert res.status_code == 200
    body = res.json()
    assert body["token"]
    assert body["user"]["name"] == "Amy"
    assert body["user"]["email"] == "a@x.com"
    assert isinstance(body["user"]["id"], str)


def test_repeat_signup_with_same_email_is_conflict(client):
    payload = {"name": "Amy", "email": "a@x.com", "password": "pass"}
    assert client.post("/auth/signup", json=payload).status_code == 200

    res = client.post("/auth/signup", json=payload)
    assert res.status_code == 409
    assert res.json()["message"] == "Email already exists"


def test_signup_normalizes_email(client, db):
    res = client.post("/auth/signup", json={"name": "Amy", "email": "Amy@X.com", "password": "pass"})
    assert res.status_code == 200
    assert res.json()["user"]["email"] == "amy@x.com"

    dup = client.post("/auth/signup", json={"name": "Amy", "email": "amy@x.COM", "password": "pass"})
    assert dup.status_code == 409
    assert db.query(User).count() == 1


def test_signup_rejects_invalid_payload(client, db):
    res = client.post("/auth/signup", json={"name": "A", "email": "not-an-email", "password": "p"})
    assert res.status_code == 400
    body = res.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["details"]
    assert db.query(User).count() == 0


def test_signup_rejects_password_over_72_bytes(client, db):
    # 40 characters, but 80 bytes in UTF-8
    res = client.post("/auth/signup", json={"name": "Amy", "email": "a@x.com", "password": "é" * 40})
    assert res.status_code == 400
    assert res.json()["details"][0]["field"] == "body.password"
    assert db.query(User).count() == 0


def test_signup_accepts_multibyte_password_within_72_bytes(client):
    password = "é" * 36
    res = client.post("/auth/signup", json={"name": "Amy", "email": "a@x.com", "password": password})
    assert res.status_code == 200

    res = client.post("/auth/login", json={"email": "a@x.com", "password": password})
    assert res.status_code == 200


def test_login_rejects_password_over_72_bytes(client, amy):
    res = client.post("/auth/login", json={"email": "a@x.com", "password": "é" * 40})
    assert res.status_code == 400


def test_password_is_not_stored_in_clear(client, db):
    client.post("/auth/signup", json={"name": "Amy", "email": "a@x.com", "password": "pass"})
    user = db.query(User).one()
    assert user.password_hash != "pass"


def test_login_with_correct_password(client, amy):
    res = client.post("/auth/login", json={"email": "a@x.com", "password": "pass"})
    assert res.status_code == 200
    body = res.json()
    assert body["user"] == amy["user"]
    assert body["token"]


def test_login_unknown_account_is_401(client):
    res = client.post("/auth/login", json={"email": "ghost@x.com", "password": "pass"})
    assert res.status_code == 401
    assert res.json()["message"] == "Account not found"


def test_login_wrong_password_is_401(client, amy):
    res = client.post("/auth/login", json={"email": "a@x.com", "password": "nope"})
    assert res.status_code == 401
    assert res.json()["message"] == "Wrong password"


def test_login_rejects_invalid_payload(client):
    res = client.post("/auth/login", json={"email": "a@x.com"})
    assert res.status_code == 400


def test_me_returns_current_user(client, amy):
    res = client.get("/auth/me", headers=amy["headers"])
    assert res.status_code == 200
    assert res.json() == amy["user"]


def test_me_without_token_is_401(client):
    assert client.get("/auth/me").status_code == 401


def test_me_with_garbage_token_is_401(client):
    res = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401


def test_auth_actions_are_audited(client, db, amy):
    client.post("/auth/login", json={"email": "a@x.com", "password": "nope"})
    actions = [(row.action, row.status) for row in db.query(Log).order_by(Log.id)]
    assert ("SIGNUP", "SUCCESS") in actions
    assert ("LOGIN", "FAIL") in actions


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"ok": True}
