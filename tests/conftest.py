import os

# Keep the app's module-level engine off disk during tests
os.environ.setdefault("COMBAT_TRACKER_DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from combat_tracker.database import Base, get_db
from combat_tracker.main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, headers={"X-User-Id": "user_123"}) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def participant_payloads():
    return [
        {"id": "goblin", "name": "Goblin Ambusher", "type": "monster", "initiativeValue": 14, "maxHP": 7, "acValue": 15},
        {"id": "barbarian", "name": "Barbarian", "type": "character", "initiativeValue": 18, "maxHP": 60, "acValue": 16},
        {"id": "wolf", "name": "Wolf", "type": "monster", "initiativeValue": 14, "maxHP": 11},
    ]


@pytest.fixture
def session_id(client, participant_payloads):
    response = client.post("/combat-sessions", json={"participants": participant_payloads})
    assert response.status_code == 201
    return response.json()["data"]["id"]
