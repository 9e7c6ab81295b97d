"""Pytest configuration and fixtures for integration tests.

These run against a real SQLite document store in a temporary directory.
"""

from collections.abc import AsyncIterator

import pytest
from fastapi.testclient import TestClient

from src.core.db_client import SQLiteDocumentStore
from src.core.stores import IdentityStore, TaskStore
from src.main import create_app


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "taskdeck-test.db")


@pytest.fixture
async def sqlite_store(db_path) -> AsyncIterator[SQLiteDocumentStore]:
    """Connected store, closed after the test."""
    store = SQLiteDocumentStore(db_path)
    await store.connect()
    yield store
    await store.close()


@pytest.fixture
def task_store(sqlite_store) -> TaskStore:
    return TaskStore(sqlite_store)


@pytest.fixture
def identity_store(sqlite_store) -> IdentityStore:
    return IdentityStore(sqlite_store)


@pytest.fixture
def app_client(db_path, monkeypatch):
    """Client over the full app, lifespan included, pointed at a temporary database."""
    monkeypatch.setattr("src.main.settings.sqlite_db_path", db_path)
    monkeypatch.setattr("src.main.settings.secret_key", "integration-secret")
    monkeypatch.setattr("src.main.settings.bcrypt_rounds", 4)
    monkeypatch.setattr("src.main.configure_logfire", lambda: None)

    app = create_app()
    with TestClient(app) as client:
        yield client
