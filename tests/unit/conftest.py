"""Pytest configuration and fixtures for unit tests."""

import pytest
from fastapi.testclient import TestClient

from src.core.security import PasswordHasher, TokenService
from src.core.stores import IdentityStore, TaskStore
from src.main import create_app
from tests.unit.mocks import InMemoryDocumentStore


TEST_SECRET = "unit-test-secret"
TEST_TTL_SECONDS = 3600


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDocumentStore for each test."""
    return InMemoryDocumentStore()


@pytest.fixture
def identity_store(in_memory_db) -> IdentityStore:
    return IdentityStore(in_memory_db)


@pytest.fixture
def task_store(in_memory_db) -> TaskStore:
    return TaskStore(in_memory_db)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_service(clock) -> TokenService:
    return TokenService(TEST_SECRET, TEST_TTL_SECONDS, clock=clock)


@pytest.fixture
def hasher() -> PasswordHasher:
    """Fast bcrypt hasher (minimum cost factor)."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def client(in_memory_db, token_service, hasher) -> TestClient:
    """Test client over the real routers with the in-memory store injected.

    The lifespan is not entered, so no real database or Logfire setup happens.
    """
    test_app = create_app()
    test_app.state.document_store = in_memory_db
    test_app.state.token_service = token_service
    test_app.state.password_hasher = hasher
    return TestClient(test_app)


def register_account(client: TestClient, email: str = "alice@example.com", password: str = "secret123") -> dict:
    """Register an account through the API and return the response body."""
    response = client.post(
        "/auth/register",
        json={"name": email.split("@")[0].title(), "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice_headers(client) -> dict[str, str]:
    return auth_headers(register_account(client, "alice@example.com")["token"])


@pytest.fixture
def bob_headers(client) -> dict[str, str]:
    return auth_headers(register_account(client, "bob@example.com")["token"])


@pytest.fixture
def sample_task_data():
    """Returns sample task payload for testing."""
    return {
        "title": "Write report",
        "description": "Quarterly numbers",
        "status": "pending",
        "priority": "high",
        "dueDate": "2026-11-01",
    }
