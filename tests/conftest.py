"""
Pytest configuration and fixtures.
"""
import os

# Settings are read at import time; keep the app away from real databases and limits
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("AUTO_CREATE_DB", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from planta.auth.security import get_password_hash
from planta.db import Base, get_db
from planta.main import app
from planta.models.models import Usuario


# SQLite in-memory database for testing
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

VIN = "1HGCM82633A004352"
OTHER_VIN = "WVWZZZ1JZXW000001"


@pytest.fixture(scope="function")
def db_session():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(db_session, user_id, full_name, email, activo=True, password="secreto1", rol="user"):
    user = Usuario(
        id=user_id,
        full_name=full_name,
        email=email,
        rol=rol,
        activo=activo,
        password_hash=get_password_hash(password),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def operator(db_session):
    return make_user(db_session, 7, "Lucía Fernández", "lucia@planta.es")


@pytest.fixture
def other_operator(db_session):
    return make_user(db_session, 8, "Marcos Ruiz", "marcos@planta.es")


@pytest.fixture
def inactive_operator(db_session):
    return make_user(db_session, 9, "Pedro Baja", "pedro@planta.es", activo=False)
