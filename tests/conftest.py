"""
tests/conftest.py -- Shared test fixtures for the guardian service.

This module provides:
  - notifier: a FakeNotifier (see tests/fakes.py) for the flow unit tests
  - hasher / issuer: real bcrypt (minimum cost) and a real JWT issuer
  - api_client: TestClient over the real FastAPI app with a patched lifespan

Design: the API tests use a SQLite file under pytest's tmp dir rather than
:memory:. Store calls run in worker threads (asyncio.to_thread) and a plain
:memory: DB is per-connection, so each thread would see a blank schema.

Environment variables must be set before any api/core import so
get_settings() picks them up: DEBUG lets it auto-generate SECRET_KEY,
HASH_COST=4 keeps bcrypt fast, ALLOWED_HOSTS admits TestClient's host.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any api/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("HASH_COST", "4")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')

import pytest
from fastapi.testclient import TestClient

from auth.hasher import SecretHasher
from auth.store import AccountStore
from auth.tokens import TokenIssuer
from fakes import FakeNotifier

TEST_SECRET_KEY = "test-secret-key-0123456789abcdef0123456789"


# ---------------------------------------------------------------------------
# Unit fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def hasher() -> SecretHasher:
    return SecretHasher(cost=4)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(secret_key=TEST_SECRET_KEY, expire_seconds=3600)


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


# ---------------------------------------------------------------------------
# API fixture -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(tmp_path_factory) -> Generator[tuple[TestClient, FakeNotifier], None, None]:
    """Yield (client, notifier) for API integration tests.

    The TestClient runs the real FastAPI app. Only the lifespan is replaced:
    it wires an AccountStore on a throwaway SQLite file and a FakeNotifier
    through api.main.wire_flows, the same function production startup uses.
    """
    from api.main import app, wire_flows
    from core.config import get_settings

    db_path = tmp_path_factory.mktemp("accounts") / "guardians.db"
    account_store = AccountStore(f"sqlite:///{db_path}")
    fake_notifier = FakeNotifier()

    @asynccontextmanager
    async def test_lifespan(app):
        wire_flows(app, get_settings(), account_store, fake_notifier)
        yield

    app.router.lifespan_context = test_lifespan

    with TestClient(app, raise_server_exceptions=False) as client:
        yield client, fake_notifier

    account_store.close()
