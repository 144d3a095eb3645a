"""
Test configuration for the clinic auth backend.
"""
import os

# Settings are read when clinic_auth is first imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_ACCESS_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
for name in ("BOOTSTRAP_ADMIN_USERNAME", "BOOTSTRAP_ADMIN_EMAIL", "BOOTSTRAP_ADMIN_PASSWORD"):
    os.environ.pop(name, None)

import itertools
import pytest
from datetime import date
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clinic_auth.auth.models import User, UserRole, AccountStatus, Gender
from clinic_auth.core.security import hash_password
from clinic_auth.database import Base, get_db
from clinic_auth.main import app

DEFAULT_PASSWORD = "Secret1!"

# Create test database engine
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enforce foreign keys the way PostgreSQL does
@event.listens_for(engine, "connect")
def enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Create test session factory
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    """
    Create a fresh database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """
    Create a test client with a test database session.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides = {}


@pytest.fixture
def make_user(db):
    """
    Factory inserting a user straight into the directory store.
    """
    counter = itertools.count(1)

    def _make_user(
        username=None,
        password=DEFAULT_PASSWORD,
        roles=(UserRole.USER,),
        active=True,
        status=AccountStatus.ACTIVE,
    ):
        n = next(counter)
        username = username or f"user{n}"
        user = User(
            username=username,
            email=f"{username}@example.com",
            first_name="Test",
            last_name=f"User{n}",
            dob=date(1990, 1, 1),
            gender=Gender.FEMALE,
            health_id=f"MRN-TEST-{username.upper()}",
            password_hash=hash_password(password),
            active=active,
            status=status,
            roles=[role.value for role in roles],
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def login(client):
    """
    Log a user in over HTTP and return the token pair as a dict.
    """
    def _login(login_id, password=DEFAULT_PASSWORD):
        response = client.post("/api/v1/auth/login", json={"login_id": login_id, "password": password})
        assert response.status_code == 200, response.text
        return response.json()["tokens"]

    return _login


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
