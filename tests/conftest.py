# tests/conftest.py
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shikishi.core.database import enable_sqlite_foreign_keys
from shikishi.main import app
from shikishi.models import Base
from shikishi.services.deps import get_db
from shikishi.services.websocket_manager import WebSocketManager


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def client(session_factory, monkeypatch):
    # Tables come from session_factory; keep startup away from the real database
    monkeypatch.setattr("shikishi.main.AUTO_CREATE_TABLES", False)

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    WebSocketManager.reset_instance()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    WebSocketManager.reset_instance()


@pytest.fixture()
def board(client):
    """A freshly created board plus its manage token."""
    resp = client.post(
        "/api/messageboards",
        json={"title": "Congrats!", "recipient": "Tanaka", "backgroundColor": "#FFEEDD"},
    )
    assert resp.status_code == 201
    return resp.json()