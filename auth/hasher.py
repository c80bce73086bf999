"""
auth/hasher.py -- One-way hashing and constant-time comparison of secrets.

Passwords and reset codes both go through bcrypt. bcrypt's cost factor makes
brute-forcing a leaked hash expensive, and bcrypt.checkpw compares digests in
constant time.

bcrypt is used directly (no passlib wrapper): passlib's wrap-bug detection
probes with a password longer than 72 bytes, which bcrypt 4.x rejects.

bcrypt is CPU-bound. SecretHasher runs it via asyncio.to_thread so a login
storm does not stall the event loop for every other request.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import asyncio

import bcrypt

from auth.errors import HashingError


def hash_secret(secret: str, cost: int) -> str:
    """Return a salted bcrypt hash of secret using `cost` log rounds.

    Raises HashingError if bcrypt rejects the cost (outside 4..31) or the
    secret (longer than 72 bytes on bcrypt >= 4.1). Empty secrets hash fine.
    """
    try:
        salt = bcrypt.gensalt(rounds=cost)
        return bcrypt.hashpw(secret.encode("utf-8"), salt).decode("utf-8")
    except ValueError as exc:
        raise HashingError(f"bcrypt rejected input: {exc}") from exc


def compare_secret(secret: str, hashed: str) -> bool:
    """Return True if secret matches the bcrypt hash.

    An empty hash (no secret ever stored) never matches. A non-empty value
    that is not a bcrypt hash raises HashingError -- that is corrupted data,
    not a wrong guess.
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(secret.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError as exc:
        raise HashingError(f"malformed bcrypt hash: {exc}") from exc


class SecretHasher:
    """Async facade over hash_secret / compare_secret with a default cost.

    Usage:
        hasher = SecretHasher(cost=settings.hash_cost)
        hashed = await hasher.hash("secret123")
        assert await hasher.compare("secret123", hashed)
    """

    def __init__(self, cost: int = 12) -> None:
        self.cost = cost

    async def hash(self, secret: str, cost: int | None = None) -> str:
        return await asyncio.to_thread(hash_secret, secret, self.cost if cost is None else cost)

    async def compare(self, secret: str, hashed: str) -> bool:
        return await asyncio.to_thread(compare_secret, secret, hashed)
