"""Unit tests for auth/store.py -- AccountStore against a real SQLite file.

Covers:
- create() returns the stored account and rejects duplicate email or phone
- find_by_email() / find_by_id() return None for unknown keys
- update_access_token() / update_verification_token() / update_password()
  report whether a row was touched and write only their own columns
"""

import pytest

from auth.models import AccountDraft
from auth.store import AccountStore


@pytest.fixture
def store(tmp_path):
    s = AccountStore(f"sqlite:///{tmp_path / 'guardians.db'}")
    yield s
    s.close()


def _draft(email="a@x.com", phone="5511999990000") -> AccountDraft:
    return AccountDraft(
        first_name="Ana",
        last_name="Souza",
        email=email,
        phone=phone,
        password_hash="$2b$04$fakehashfakehashfakehashfakehashfakehashfakehashfake",
    )


@pytest.mark.asyncio
async def test_create_and_find(store):
    created = await store.create(_draft())

    assert created is not None
    assert len(created.id) == 32
    assert created.created_at
    assert created.access_token is None
    assert created.verification_token is None
    assert await store.find_by_email("a@x.com") == created
    assert await store.find_by_id(created.id) == created


@pytest.mark.asyncio
async def test_find_unknown_returns_none(store):
    assert await store.find_by_email("nobody@x.com") is None
    assert await store.find_by_id("0" * 32) is None


@pytest.mark.asyncio
async def test_create_rejects_duplicate_email(store):
    await store.create(_draft())
    assert await store.create(_draft(phone="5511000000000")) is None


@pytest.mark.asyncio
async def test_create_rejects_duplicate_phone(store):
    await store.create(_draft())
    assert await store.create(_draft(email="b@x.com")) is None


@pytest.mark.asyncio
async def test_update_access_token(store):
    account = await store.create(_draft())

    assert await store.update_access_token(account.id, "tok-1") is True
    assert (await store.find_by_id(account.id)).access_token == "tok-1"
    assert await store.update_access_token("0" * 32, "tok-1") is False


@pytest.mark.asyncio
async def test_update_verification_token_sets_and_clears(store):
    account = await store.create(_draft())

    assert await store.update_verification_token(account.id, "hash", "2030-01-01T00:00:00+00:00") is True
    pending = await store.find_by_id(account.id)
    assert pending.verification_token == "hash"
    assert pending.verification_token_expires_at == "2030-01-01T00:00:00+00:00"

    assert await store.update_verification_token(account.id, None) is True
    cleared = await store.find_by_id(account.id)
    assert cleared.verification_token is None
    assert cleared.verification_token_expires_at is None


@pytest.mark.asyncio
async def test_update_verification_token_unknown_id(store):
    assert await store.update_verification_token("0" * 32, "hash") is False


@pytest.mark.asyncio
async def test_update_password_clears_access_token(store):
    account = await store.create(_draft())
    await store.update_access_token(account.id, "tok-1")

    assert await store.update_password(account.id, "new-hash") is True
    updated = await store.find_by_id(account.id)
    assert updated.password_hash == "new-hash"
    assert updated.access_token is None


def test_ping(store):
    assert store.ping() is True
