import os

# Must be set before classboard modules read their configuration
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("PBKDF2_ITERATIONS", "1000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from classboard.database import build_engine, create_tables, get_db
from classboard.main import app
from classboard.services.classroom_store import ClassroomStore
from classboard.services.locking import ClassroomLocks

CLASS_FIELDS = {
    "password": "pw1234",
    "name": "Math 4B",
    "secret_question": "What was the name of your first pet?",
    "secret_answer": "Rexy",
}


@pytest.fixture
def engine():
    engine = build_engine("sqlite:///:memory:", poolclass=StaticPool)
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def today():
    return date(2026, 10, 18)


@pytest.fixture
def store(db, today):
    return ClassroomStore(db, locks=ClassroomLocks(), today=lambda: today)


@pytest.fixture
def classroom(store):
    """A created classroom and its initial teacher token."""
    return store.create(**CLASS_FIELDS)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def teacher(client):
    """Create the classroom over HTTP; returns (classroom_id, token)."""
    response = client.post("/api/classrooms", json=CLASS_FIELDS)
    assert response.status_code == 201
    body = response.json()
    return body["classroom"]["id"], body["teacher_token"]
