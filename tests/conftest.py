"""
tests/conftest.py -- Shared test fixtures for SaltGate.

This module provides:
  - _patch_lifespan(): wires a test store into app.state, bypassing real startup
  - api_client: TestClient over a real SqlUserStore in a temp SQLite file
  - memory_client: TestClient over an InMemoryUserStore
  - memory_store / service: function-scoped in-memory store and AuthService

The API fixtures use a file-backed SQLite DB rather than a shared-memory URI:
TestClient runs sync handlers in a thread pool, and the concurrency tests
need real SQLite locking instead of shared-cache table locks.

DEBUG and LOGIN_RATE_LIMIT must be set before any core/auth/api import so
get_settings() auto-generates SECRET_KEY and the login limit does not trip
during the suite.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set env before any core/auth/api import -- get_settings() is cached.
os.environ.setdefault("DEBUG", "true")
os.environ["LOGIN_RATE_LIMIT"] = "10000/minute"
os.environ["SALT_PEPPER"] = "server-pepper-secret"

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.hashing import client_password_hash, login_proof
from auth.salt import derive_salt
from auth.service import AuthService
from auth.store import InMemoryUserStore, SqlUserStore, UserStore

PEPPER = "server-pepper-secret"


def _patch_lifespan(store: UserStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = store
        app.state.auth_service = AuthService(store, pepper=PEPPER)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Protocol helpers -- what a well-behaved client computes
# ---------------------------------------------------------------------------


def password_hash_for(username: str, password: str) -> str:
    return client_password_hash(password, derive_salt(username, PEPPER))


def proof_for(username: str, password: str, nonce: str) -> str:
    return login_proof(password_hash_for(username, password), nonce)


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(tmp_path_factory) -> Generator[tuple[TestClient, SqlUserStore], None, None]:
    """Yield (client, store) backed by a fresh SQLite file per test module."""
    db_path = tmp_path_factory.mktemp("auth") / "auth.db"
    store = SqlUserStore(f"sqlite:///{db_path}")
    app.router.lifespan_context = _patch_lifespan(store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, store

    store.close()


@pytest.fixture(scope="module")
def memory_client() -> Generator[tuple[TestClient, InMemoryUserStore], None, None]:
    store = InMemoryUserStore()
    app.router.lifespan_context = _patch_lifespan(store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, store


# ---------------------------------------------------------------------------
# Function-scoped fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def service(memory_store: InMemoryUserStore) -> AuthService:
    return AuthService(memory_store, pepper=PEPPER)
