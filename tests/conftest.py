"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory repository and recording email sender
- Domain services with a cheap bcrypt cost
- Test client wired to the real application and error boundary
- User factories
"""

import os

# Configure the application before anything imports the settings
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("EMAIL_BACKEND", "console")
os.environ.setdefault("BCRYPT_COST", "4")

from collections.abc import Callable, Generator  # noqa: E402
from unittest.mock import Mock  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from src.adapters.repository.memory import InMemoryUserRepository  # noqa: E402
from src.api.dependencies import get_email_sender  # noqa: E402
from src.api.main import create_app  # noqa: E402
from src.domain.authentication import AuthenticationService  # noqa: E402
from src.domain.ports import User  # noqa: E402
from src.domain.registration import RegistrationService  # noqa: E402
from src.domain.security import PasswordHasher  # noqa: E402
from src.domain.users import UserService  # noqa: E402

DEFAULT_PASSWORD = "P4ssword"


@pytest.fixture
def repository() -> InMemoryUserRepository:
    """Fresh in-memory user store for each test."""
    return InMemoryUserRepository()


@pytest.fixture
def email_sender() -> Mock:
    """Email sender recording every activation message."""
    return Mock()


@pytest.fixture
def hasher() -> PasswordHasher:
    """bcrypt hasher at minimum cost to keep tests fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def registration_service(
    repository: InMemoryUserRepository, email_sender: Mock, hasher: PasswordHasher
) -> RegistrationService:
    return RegistrationService(repository=repository, email_sender=email_sender, hasher=hasher)


@pytest.fixture
def auth_service(
    repository: InMemoryUserRepository, hasher: PasswordHasher
) -> AuthenticationService:
    return AuthenticationService(repository=repository, hasher=hasher)


@pytest.fixture
def user_service(repository: InMemoryUserRepository) -> UserService:
    return UserService(repository=repository)


@pytest.fixture
def add_user(
    repository: InMemoryUserRepository, hasher: PasswordHasher
) -> Callable[..., User]:
    """
    Factory inserting a user directly into the store.

    Users are ACTIVE unless ``inactive=True`` is passed.
    """
    counter = iter(range(1, 1000))

    def factory(
        username: str | None = None,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        inactive: bool = False,
    ) -> User:
        n = next(counter)
        token = f"activation-token-{n}"
        user = repository.create(
            username or f"user{n}",
            email or f"user{n}@mail.com",
            hasher.hash(password),
            token,
        )
        if not inactive:
            repository.activate(token)
        return repository.find_by_id(user.id)

    return factory


@pytest.fixture
def app(repository: InMemoryUserRepository, email_sender: Mock) -> Generator[FastAPI, None, None]:
    """Application with the in-memory store and the recording email sender."""
    test_app = create_app()
    test_app.state.repository = repository
    test_app.dependency_overrides[get_email_sender] = lambda: email_sender
    yield test_app
    test_app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client for the application."""
    return TestClient(app)
