"""
Shared fixtures for the test suite.

Every test gets its own in-memory SQLite database. API tests drive the app
through ``TestClient`` (which runs the lifespan: schema creation, default
statuses and the seed admin); service tests use a ``Session`` on the same
kind of engine directly. When an API test also opens a ``Session`` on
the shared engine, the two take turns: the session is closed before the next
request is sent.
"""

from collections.abc import Generator
from typing import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlmodel import Session

from tasktracker.core.config import Settings
from tasktracker.db.session import create_db_engine, init_db
from tasktracker.main import create_app
from tasktracker.services.bootstrap import run_bootstrap

from .helpers import ADMIN_EMAIL, ADMIN_PASSWORD, API, DEFAULT_PASSWORD, auth_headers


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        DATABASE_URL="sqlite://",
        ADMIN_SEED_EMAIL=ADMIN_EMAIL,
        ADMIN_SEED_PASSWORD=ADMIN_PASSWORD,
        ADMIN_SEED_NAME="System Admin",
        SEED_DEFAULT_STATUSES=True,
    )


@pytest.fixture()
def engine(settings: Settings) -> Generator[Engine, None, None]:
    engine_ = create_db_engine(settings.DATABASE_URL)
    yield engine_
    engine_.dispose()


@pytest.fixture()
def session(engine: Engine, settings: Settings) -> Generator[Session, None, None]:
    """A bootstrapped database session for service-level tests."""
    init_db(engine)
    run_bootstrap(engine, settings)
    with Session(engine, expire_on_commit=False) as session_:
        yield session_


@pytest.fixture()
def app(settings: Settings, engine: Engine) -> FastAPI:
    return create_app(settings, engine)


@pytest.fixture()
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    # The context manager runs the lifespan (tables, seed statuses, seed admin)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def register(client: TestClient) -> Callable[..., dict]:
    """Register a user and return the session response body."""

    def _register(email: str, full_name: str = "Test User", password: str = DEFAULT_PASSWORD) -> dict:
        response = client.post(
            f"{API}/auth/register",
            json={"fullName": full_name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture()
def login(client: TestClient) -> Callable[..., dict]:
    def _login(email: str, password: str = DEFAULT_PASSWORD) -> dict:
        response = client.post(f"{API}/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return response.json()

    return _login


@pytest.fixture()
def admin_headers(login: Callable[..., dict]) -> dict:
    return auth_headers(login(ADMIN_EMAIL, ADMIN_PASSWORD)["token"])
