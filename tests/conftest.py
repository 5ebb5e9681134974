"""Shared fixtures: in-memory database, API test client, signed-up users.

Every test gets a fresh in-memory SQLite database (StaticPool keeps the one
connection alive across sessions and threads) and get_db is overridden to
hand out sessions bound to it.
"""

import os

# Must be set before the backend modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
import models.users, models.order, models.favorite, models.log  # noqa: E401,F401
from main import app


@pytest.fixture
def test_engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def override_db(session_factory):
    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_db):
    return TestClient(override_db)


def _signup(client, name, email, password="pass"):
    res = client.post("/auth/signup", json={"name": name, "email": email, "password": password})
    assert res.status_code == 200, res.text
    return res.json()


@pytest.fixture
def amy(client):
    """Signed-up user; returns the {user, token} body plus ready auth headers."""
    body = _signup(client, "Amy", "a@x.com")
    body["headers"] = {"Authorization": f"Bearer {body['token']}"}
    return body


@pytest.fixture
def bob(client):
    body = _signup(client, "Bob", "bob@shop.com")
    body["headers"] = {"Authorization": f"Bearer {body['token']}"}
    return body
