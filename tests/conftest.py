import os

# Keep the app's default engine off disk while tests run
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app import app
from core import dependencies
from core.database import get_db
from models.base import Base
from utils.inventory_manager import InventoryManager
from utils.session_manager import SessionManager
from utils.user_manager import UserManager

# Lowest cost bcrypt accepts; keeps signup fast in tests
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def inventory(db_session):
    return InventoryManager(db_session)


@pytest.fixture
def users(db_session):
    return UserManager(db_session, bcrypt_rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def session_manager():
    return SessionManager(idle_timeout_seconds=3600, secret_key="test-secret")


@pytest.fixture
def api(session_factory, session_manager):
    """Point the app at the test database and session store."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    def override_get_user_manager(db: Session = Depends(get_db)) -> UserManager:
        return UserManager(db, bcrypt_rounds=TEST_BCRYPT_ROUNDS)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[dependencies.get_user_manager] = override_get_user_manager
    app.dependency_overrides[dependencies.get_session_manager] = lambda: session_manager
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(api):
    return TestClient(api)


@pytest.fixture
def login_as(api):
    """Return a factory producing a TestClient logged in with a fresh account."""

    def _login_as(role: str, username: str = None, password: str = "secret-pass") -> TestClient:
        username = username or f"{role}-user"
        client = TestClient(api)
        resp = client.post(
            "/api/signup",
            json={"username": username, "password": password, "role": role},
        )
        assert resp.status_code == 200, resp.text
        resp = client.post(
            "/api/login", json={"username": username, "password": password}
        )
        assert resp.status_code == 200, resp.text
        return client

    return _login_as
