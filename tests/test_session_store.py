"""Identity token store: one session value, one write path, survives restarts."""

import json

from shopclient.session import Identity, Session, SessionStore

AMY = Session(identity=Identity(id="1", name="Amy", email="a@x.com"), token="tok-1")


def test_save_and_reload_from_disk(tmp_path):
    path = tmp_path / "session.json"
    SessionStore(path).save(AMY)

    restored = SessionStore(path)
    assert restored.current is None
    assert restored.load() == AMY
    assert restored.token == "tok-1"
    assert restored.identity.name == "Amy"


def test_clear_removes_both_halves(tmp_path):
    path = tmp_path / "session.json"
    store = SessionStore(path)
    store.save(AMY)
    store.clear()

    assert store.current is None
    assert store.token is None
    assert store.identity is None
    assert not path.exists()
    assert SessionStore(path).load() is None


def test_missing_file_means_signed_out(tmp_path):
    assert SessionStore(tmp_path / "nope.json").load() is None


def test_corrupt_file_means_signed_out(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json")
    assert SessionStore(path).load() is None


def test_token_without_user_is_rejected(tmp_path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps({"token": "orphan"}))
    store = SessionStore(path)
    assert store.load() is None
    assert store.token is None


def test_in_memory_store():
    store = SessionStore()
    store.save(AMY)
    assert store.current == AMY
    store.save(None)
    assert store.current is None


def test_numeric_user_id_is_normalized():
    session = Session.from_json({"user": {"id": 7, "name": "Amy", "email": "a@x.com"}, "token": "t"})
    assert session.identity.id == "7"
