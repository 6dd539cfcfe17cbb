"""
tests/conftest.py -- Shared test fixtures for the employee auth test suite.

This module provides:
  - RecordingEmailSender: in-memory transport that records (or refuses) mail
  - store / service fixtures: isolated in-memory SQLite + wired CredentialService
  - make_user() / user_factory: insert a user with a known password through the store
  - api_client: TestClient over the real app with a patched lifespan

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the API client because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to each
worker thread. The named URI format shares one in-memory instance across all
connections in the same process.

DEBUG must be set before any api/ or core/ import so get_settings() can
auto-generate SECRET_KEY instead of raising. BCRYPT_ROUNDS is lowered to the
bcrypt minimum so hashing does not dominate the run time.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: set before any core/api import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from auth.errors import EmailDeliveryError
from auth.models import User
from auth.passwords import PasswordGenerator, PasswordHasher, PasswordPolicy
from auth.service import CredentialService
from auth.store import UserStore
from auth.tokens import TokenIssuer
from core.config import PasswordPolicyConfig, TokenConfig

TEST_SIGNING_KEY = "test-signing-key-0123456789abcdef0123456789"
TEST_ISSUER = "EmployeeAuth.Tests"
TEST_AUDIENCE = "EmployeeAuth.Tests.Clients"

# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


@dataclass
class SentEmail:
    to: str
    subject: str
    body: str


class RecordingEmailSender:
    """EmailSender that keeps messages in memory. Set fail=True to simulate an outage."""

    def __init__(self, fail: bool = False) -> None:
        self.sent: list[SentEmail] = []
        self.fail = fail

    def send(self, to: str, subject: str, body: str) -> None:
        if self.fail:
            raise EmailDeliveryError(f"simulated outage sending to {to}")
        self.sent.append(SentEmail(to=to, subject=subject, body=body))


# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def policy_config() -> PasswordPolicyConfig:
    return PasswordPolicyConfig(min_length=12, min_special_chars=2, allowed_special_chars="@#!%&")


@pytest.fixture
def token_config() -> TokenConfig:
    return TokenConfig(key=TEST_SIGNING_KEY, issuer=TEST_ISSUER, audience=TEST_AUDIENCE)


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def issuer(token_config: TokenConfig) -> TokenIssuer:
    return TokenIssuer(token_config)


@pytest.fixture
def service(
    store: UserStore,
    policy_config: PasswordPolicyConfig,
    hasher: PasswordHasher,
    issuer: TokenIssuer,
    email_sender: RecordingEmailSender,
) -> CredentialService:
    return CredentialService(
        store=store,
        policy=PasswordPolicy(policy_config),
        generator=PasswordGenerator(policy_config),
        hasher=hasher,
        issuer=issuer,
        email=email_sender,
    )


def make_user(
    store: UserStore,
    hasher: PasswordHasher,
    username: str = "john",
    email: str = "john@test.com",
    name: str = "John Doe",
    password: str = "Str0ng#Pass!word",
) -> User:
    """Insert a user with a known plaintext password and return the stored record."""
    user = User(id=str(uuid.uuid4()), username=username, email=email, name=name, password_hash="")
    user.password_hash = hasher.hash(user, password)
    store.create_user(user)
    return store.get_by_id(user.id)


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------


@dataclass
class ApiHarness:
    client: TestClient
    store: UserStore
    service: CredentialService
    email: RecordingEmailSender
    hasher: PasswordHasher


def _patch_lifespan(store: UserStore, service: CredentialService):
    """Return an async context manager that replaces the real lifespan.

    Wires the pre-built test store and service into app.state so routes see
    an isolated database and a recording email transport.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = store
        app.state.credentials = service
        app.state.token_issuer = service.token_issuer
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[ApiHarness, None, None]:
    """Yield an ApiHarness over the real FastAPI app.

    One isolated shared-memory database per test module. The policy is the
    production default (12 chars, 2 specials from "@#!%&").
    """
    from api.main import app

    db_name = f"test_auth_{request.module.__name__.rsplit('.', 1)[-1]}"
    store = UserStore(f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true")
    policy_config = PasswordPolicyConfig()
    hasher = PasswordHasher(rounds=4)
    email = RecordingEmailSender()
    service = CredentialService(
        store=store,
        policy=PasswordPolicy(policy_config),
        generator=PasswordGenerator(policy_config),
        hasher=hasher,
        issuer=TokenIssuer(TokenConfig(key=TEST_SIGNING_KEY, issuer=TEST_ISSUER, audience=TEST_AUDIENCE)),
        email=email,
    )

    app.router.lifespan_context = _patch_lifespan(store, service)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiHarness(client=client, store=store, service=service, email=email, hasher=hasher)

    store.close()


@pytest.fixture
def user_factory(store: UserStore, hasher: PasswordHasher):
    """Return make_user bound to the test store and hasher."""

    def _factory(**kwargs) -> User:
        return make_user(store, hasher, **kwargs)

    return _factory
