"""
tests/conftest.py -- Shared test fixtures for TodoVault.

This module provides:
  - token_config / codec / hasher: auth core components with a fixed key and
    the minimum bcrypt cost so tests stay fast
  - credential_store / auth_service: a fresh in-memory store per test
  - api_client: TestClient wired to isolated in-memory stores

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
for the API fixtures because TestClient runs sync route handlers in a thread
pool. Plain :memory: DBs are per-connection and would present a blank schema
to each worker thread.

DEBUG must be set before any app import so get_settings() auto-generates
SECRET_KEY in dev mode rather than raising ValueError. Rate limits are
raised so the suite never trips them.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# Set before any api/auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")
os.environ.setdefault("SIGNUP_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app, init_state
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.store import CredentialStore
from auth.tokens import TokenCodec
from core.config import TokenConfig, get_settings
from todos.store import TodoStore

TEST_SECRET = "x" * 64


def shared_memory_url(prefix: str) -> str:
    return f"sqlite:///file:{prefix}_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"


# ---------------------------------------------------------------------------
# Auth core fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def token_config() -> TokenConfig:
    return TokenConfig(secret_key=TEST_SECRET, ttl_seconds=3600, clock_skew_seconds=0)


@pytest.fixture
def codec(token_config: TokenConfig) -> TokenCodec:
    return TokenCodec(token_config)


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def credential_store() -> Generator[CredentialStore, None, None]:
    store = CredentialStore(shared_memory_url("creds"))
    yield store
    store.close()


@pytest.fixture
def auth_service(credential_store: CredentialStore, hasher: PasswordHasher, codec: TokenCodec) -> AuthService:
    return AuthService(credential_store, hasher, codec)


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(credential_store: CredentialStore, todo_store: TodoStore):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state through init_state() so
    TestClient routes see isolated test DBs rather than the real database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        init_state(app, get_settings(), credential_store, todo_store)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client() -> Generator[TestClient, None, None]:
    """Yield a TestClient backed by fresh in-memory stores for the module."""
    db_url = shared_memory_url("api")
    credential_store = CredentialStore(db_url=db_url)
    todo_store = TodoStore(db_url=db_url)

    app.router.lifespan_context = _patch_lifespan(credential_store, todo_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    credential_store.close()
    todo_store.close()


def signup_and_login(client: TestClient, username: str, password: str = "password123") -> dict[str, str]:
    """Register username via the API and return an Authorization header dict."""
    resp = client.post(
        "/api/v1/auth/signup",
        json={"username": username, "password": password, "email": f"{username}@example.com", "name": username},
    )
    assert resp.status_code == 201, resp.text
    resp = client.post("/api/v1/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}
