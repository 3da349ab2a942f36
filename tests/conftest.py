"""
Shared fixtures.

Password hashing runs with a tiny iteration count so the suite stays fast.
"""

import pytest

from tasklist.auth.passwords import PasswordHasher
from tasklist.auth.resolver import AuthResolver
from tasklist.auth.tokens import TokenService
from tasklist.config import Settings
from tasklist.services.tasks import TaskRepository
from tasklist.services.users import UserDirectory
from tasklist.storage import InMemoryMetadataStorage


SECRET = "test-secret-key-that-is-long-enough-for-hs256"


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        jwt_secret_key=SECRET,
        password_hash_iterations=1_000,
        storage_backend="memory",
        sentry_dsn="",
    )


@pytest.fixture
def storage():
    return InMemoryMetadataStorage()


@pytest.fixture
def hasher():
    return PasswordHasher(iterations=1_000)


@pytest.fixture
def tokens():
    return TokenService(SECRET)


@pytest.fixture
def users(storage, hasher, tokens):
    return UserDirectory(storage, hasher, tokens, password_min_length=6)


@pytest.fixture
def tasks(storage):
    return TaskRepository(storage)


@pytest.fixture
def resolver(tokens, users):
    return AuthResolver(tokens, users)


@pytest.fixture
async def alice(users):
    """A registered user and their first session token."""
    return await users.register("alice@gmail.com", "alicepass1")


@pytest.fixture
async def bob(users):
    return await users.register("bob@gmail.com", "bobpass12")
