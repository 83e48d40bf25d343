"""
pytest configuration and fixtures.
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from main import app
from users.dependencies import get_user_store
from users.repository import InMemoryUserStore


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def store() -> InMemoryUserStore:
    """Fresh in-memory store per test."""
    return InMemoryUserStore()


@pytest.fixture
def client(store: InMemoryUserStore) -> Generator[TestClient, None, None]:
    """
    HTTP client with the user store swapped for the in-memory one.

    The lifespan is not entered, so no database pool is created.
    """
    app.dependency_overrides[get_user_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def create_user(client: TestClient):
    def _create(name: str = "Ada", age: int = 30) -> dict:
        resp = client.post("/users", json={"user": {"name": name, "age": age}})
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
