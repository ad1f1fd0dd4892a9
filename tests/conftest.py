"""Shared test fixtures for Cubo Estratégia."""

import sys
import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Keep the app's own engine off the working tree during tests
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("AI_PROVIDER", "mock")

from cubo_backend.database import Base, get_db
from cubo_backend import models
from cubo_backend.ai.llm_provider import MockProvider
from cubo_backend.main import app
from cubo_backend.routers.ai import get_llm_provider


@pytest.fixture
def db_session():
    """Create an in-memory SQLite database session for testing."""
    engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def user_session(db_session):
    """Create a sample access-code session."""
    session = models.UserSession(access_code="EQUIPE-42")
    db_session.add(session)
    db_session.commit()
    db_session.refresh(session)
    return session


@pytest.fixture
def mock_provider():
    return MockProvider()


@pytest.fixture
def client(tmp_path, mock_provider):
    """Test client with a file-based temp database and the mock text provider."""
    db_path = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    TestSession = sessionmaker(bind=engine)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm_provider] = lambda: mock_provider
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def session_id(client):
    """Open a session through the API and return its id."""
    resp = client.post("/api/sessions", json={"access_code": "EQUIPE-42"})
    assert resp.status_code == 201
    return resp.json()["id"]
