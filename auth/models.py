"""
auth/models.py -- Domain dataclasses for guardian accounts.

Pattern: Data class (pure data container, zero logic) -- dataclasses own
domain shape; the store and the flows do the work.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Account:
    """A registered guardian and the credentials attached to it.

    password_hash is always a bcrypt hash, never the plaintext.
    access_token holds the most recently issued token (login or recovery);
    each issue overwrites the previous one.
    verification_token is the bcrypt hash of the pending reset code, or None
    when no reset is in progress. It is cleared once the code is used.
    """

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    password_hash: str
    access_token: str | None = None
    verification_token: str | None = None
    verification_token_expires_at: str | None = None  # ISO 8601, UTC
    created_at: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass
class AccountDraft:
    """Registration data handed to the store. password_hash is already hashed."""

    first_name: str
    last_name: str
    email: str
    phone: str
    password_hash: str
