"""
tests/fakes.py -- In-memory stand-ins for the store and the notifier.

InMemoryAccounts satisfies every protocol in auth/protocols.py and records
each write it receives, so tests can assert on exactly what a flow persisted.
"""

from __future__ import annotations

from dataclasses import replace

from auth.models import Account, AccountDraft


class InMemoryAccounts:
    def __init__(self, *accounts: Account) -> None:
        self.accounts: dict[str, Account] = {a.id: a for a in accounts}
        self.access_token_updates: list[tuple[str, str | None]] = []
        self.verification_token_updates: list[tuple[str, str | None, str | None]] = []
        self.password_updates: list[tuple[str, str]] = []

    async def find_by_email(self, email: str) -> Account | None:
        return next((a for a in self.accounts.values() if a.email == email), None)

    async def find_by_id(self, account_id: str) -> Account | None:
        return self.accounts.get(account_id)

    async def create(self, draft: AccountDraft) -> Account | None:
        if any(a.email == draft.email or a.phone == draft.phone for a in self.accounts.values()):
            return None
        account = Account(id=f"id-{len(self.accounts) + 1}", **vars(draft))
        self.accounts[account.id] = account
        return account

    async def update_access_token(self, account_id: str, token: str | None) -> bool:
        self.access_token_updates.append((account_id, token))
        if account_id not in self.accounts:
            return False
        self.accounts[account_id] = replace(self.accounts[account_id], access_token=token)
        return True

    async def update_verification_token(
        self, account_id: str, token_hash: str | None, expires_at: str | None = None
    ) -> bool:
        self.verification_token_updates.append((account_id, token_hash, expires_at))
        if account_id not in self.accounts:
            return False
        self.accounts[account_id] = replace(
            self.accounts[account_id],
            verification_token=token_hash,
            verification_token_expires_at=expires_at if token_hash is not None else None,
        )
        return True

    async def update_password(self, account_id: str, password_hash: str) -> bool:
        self.password_updates.append((account_id, password_hash))
        if account_id not in self.accounts:
            return False
        self.accounts[account_id] = replace(self.accounts[account_id], password_hash=password_hash, access_token=None)
        return True


class FakeNotifier:
    """Records every message instead of sending it."""

    def __init__(self) -> None:
        self.outbox: list[dict[str, str]] = []

    async def send(self, sender: str, to: str, subject: str, body: str) -> bool:
        self.outbox.append({"sender": sender, "to": to, "subject": subject, "body": body})
        return True
