"""
auth/protocols.py -- Capabilities the credential flows consume.

One Protocol per operation, so each flow declares exactly the store surface
it uses. auth.store.AccountStore satisfies all of them; tests satisfy them
with AsyncMock fakes.

All methods are coroutines. A "not found" is None / False, never an
exception. Any exception raised here is a system failure and propagates
through the flows untouched.
"""

from __future__ import annotations

from typing import Protocol

from auth.models import Account, AccountDraft


class EmailLookup(Protocol):
    async def find_by_email(self, email: str) -> Account | None: ...


class IdLookup(Protocol):
    async def find_by_id(self, account_id: str) -> Account | None: ...


class AccountCreator(Protocol):
    async def create(self, draft: AccountDraft) -> Account | None:
        """Insert the account; None if the email or phone is already registered."""
        ...


class AccessTokenUpdater(Protocol):
    async def update_access_token(self, account_id: str, token: str | None) -> bool: ...


class VerificationTokenUpdater(Protocol):
    async def update_verification_token(
        self, account_id: str, token_hash: str | None, expires_at: str | None = None
    ) -> bool:
        """Store (or clear, with token_hash=None) the reset-code hash."""
        ...


class PasswordUpdater(Protocol):
    async def update_password(self, account_id: str, password_hash: str) -> bool:
        """Replace the password hash and clear the access token in one write."""
        ...


class Notifier(Protocol):
    async def send(self, sender: str, to: str, subject: str, body: str) -> bool: ...


# ---------------------------------------------------------------------------
# Per-flow capability sets
# ---------------------------------------------------------------------------


class LoginAccounts(EmailLookup, AccessTokenUpdater, Protocol):
    pass


class ForgetPasswordAccounts(EmailLookup, VerificationTokenUpdater, Protocol):
    pass


class ResetCodeAccounts(EmailLookup, VerificationTokenUpdater, AccessTokenUpdater, Protocol):
    pass


class ChangePasswordAccounts(IdLookup, PasswordUpdater, Protocol):
    pass
