"""
Shared test fixtures: file-backed SQLite database, test client, workspace state.
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set env before importing app modules
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["GEMINI_API_KEY"] = ""

from studio.database import Base, get_db
from studio.hydration import Hydrator
from studio.main import app
from studio.state import StudioState


TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def fresh_workspace():
    """Each test gets its own costing form and record collections."""
    app.state.studio = StudioState()
    app.state.hydrator = Hydrator(app.state.studio)
    yield app.state.studio


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def db():
    """Direct database session for test setup/assertions."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def studio_client(client):
    """A client record created through the API."""
    response = client.post("/api/clients/", json={
        "name": "Alice Johnson",
        "email": "alice@example.com",
        "phone": "123-456-7890",
    })
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def sample_form(studio_client):
    """Form worth 16,000 direct cost, VAT registered, 25% margin."""
    return {
        "client_id": studio_client["id"],
        "materials": [{"name": "Tiles", "quantity": 10, "unit_cost": 1000}],
        "labor": [{"vendor": "Fundi", "rate_type": "hourly", "rate": 500, "hours": 8}],
        "operations": [{"name": "Transport", "cost": 2000}],
        "business_type": "vat_registered",
        "tax_rate": 16,
        "profit_margin": 25,
    }
