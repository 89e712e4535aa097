import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from restohire.db.base import Base
from restohire.db.session import get_db
from restohire.main import app
from restohire.models import Restaurant, Role, User, WorkerProfile

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "secret123"


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register a user through the API and return (user json, auth headers)."""

    def _register(email, role=Role.WORKER, name="Test User", password=DEFAULT_PASSWORD):
        response = client.post(
            "/api/v1/auth/register",
            json={"email": email, "password": password, "name": name, "role": role.value},
        )
        assert response.status_code == 201, response.text
        token = client.post(
            "/api/v1/auth/login",
            data={"username": email, "password": password},
        ).json()["access_token"]
        return response.json(), {"Authorization": f"Bearer {token}"}

    return _register


@pytest.fixture
def owner(register):
    return register("owner@example.com", Role.RESTAURANT_OWNER, name="Maria Lopez")


@pytest.fixture
def worker(register):
    return register("worker@example.com", Role.WORKER, name="Alex Kim")


@pytest.fixture
def make_user(db):
    """Insert a user with its role profile directly, bypassing password hashing."""

    def _make_user(email, role=Role.WORKER, name="Test User", skills=None):
        user = User(email=email, hashed_password="not-a-real-hash", name=name, role=role)
        db.add(user)
        db.flush()
        if role == Role.RESTAURANT_OWNER:
            db.add(Restaurant(owner_id=user.id, name=f"{name}'s Restaurant", address=""))
        else:
            db.add(WorkerProfile(user_id=user.id, skills=skills or []))
        db.commit()
        db.refresh(user)
        return user

    return _make_user


def job_payload(**overrides):
    payload = {
        "title": "Line Cook",
        "description": "Weekend brunch line cook",
        "hourly_rate": 19.5,
        "start_date": "2030-01-10T09:00:00",
        "end_date": "2030-03-10T17:00:00",
        "max_workers": 2,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def post_job(client, owner):
    """Post a job as the default owner and return the response json."""
    _, headers = owner

    def _post_job(**overrides):
        response = client.post("/api/v1/jobs", json=job_payload(**overrides), headers=headers)
        assert response.status_code == 200, response.text
        return response.json()

    return _post_job


@pytest.fixture
def job(post_job):
    return post_job()
