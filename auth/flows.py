"""
auth/flows.py -- The credential lifecycle: register, log in, reset a password.

Each flow is a dataclass whose fields are its collaborators. Nothing is looked
up globally; api/main.py builds the flows once at startup from Settings and
tests build them from fakes.

Return convention (see auth/errors.py):
  Ok(value)         -- the flow completed.
  Err(DomainError)  -- a credential or lookup outcome the caller must handle
                       (wrong password, wrong code, unknown email, conflict).
  raise             -- a collaborator failed. Nothing is retried here.

Password reset is two steps:
  1. ForgetPasswordFlow mails a numeric code and stores only its bcrypt hash,
     with an expiry.
  2. ResetCodeVerificationFlow checks the code, clears the stored hash so the
     code works once, and issues a recovery token (subject = account id) that
     ChangePasswordFlow's HTTP route accepts as a bearer token.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from auth.errors import (
    ConflictError,
    Err,
    InvalidCredentialError,
    InvalidForgetCodeError,
    NotFoundError,
    Ok,
    Result,
)
from auth.hasher import SecretHasher
from auth.models import Account, AccountDraft
from auth.protocols import (
    AccountCreator,
    ChangePasswordAccounts,
    ForgetPasswordAccounts,
    LoginAccounts,
    Notifier,
    ResetCodeAccounts,
)
from auth.tokens import TokenIssuer

logger = logging.getLogger("guardian.auth")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RegistrationFlow:
    accounts: AccountCreator
    hasher: SecretHasher

    async def register(
        self, first_name: str, last_name: str, email: str, phone: str, password: str
    ) -> Result[Account]:
        """Hash the password and create the account. Err(ConflictError) if email or phone is taken."""
        draft = AccountDraft(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            password_hash=await self.hasher.hash(password),
        )
        account = await self.accounts.create(draft)
        if account is None:
            return Err(ConflictError())
        logger.info("Account %s registered", account.id)
        return Ok(account)


@dataclass
class AuthenticationFlow:
    accounts: LoginAccounts
    hasher: SecretHasher
    tokens: TokenIssuer

    async def authenticate(self, email: str, password: str) -> Result[str]:
        """Verify email + password and return a fresh access token.

        Unknown email and wrong password produce the same Err, so the caller
        cannot tell which one happened. The new token is persisted before it
        is returned; it replaces whatever token the account held.
        """
        account = await self.accounts.find_by_email(email)
        if account is None:
            return Err(InvalidCredentialError())
        if not await self.hasher.compare(password, account.password_hash):
            return Err(InvalidCredentialError())

        token = self.tokens.issue(account.email)
        await self.accounts.update_access_token(account.id, token)
        logger.info("Account %s logged in", account.id)
        return Ok(token)


@dataclass
class ForgetPasswordFlow:
    accounts: ForgetPasswordAccounts
    hasher: SecretHasher
    tokens: TokenIssuer
    notifier: Notifier
    sender: str
    code_expire_seconds: int = 900
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def forget_password(self, email: str) -> Result[bool]:
        """Mail a one-time reset code to the account holder.

        Err(NotFoundError("email")) when no account matches; nothing is
        stored or sent in that case. Ok(True) only once the code hash is
        persisted and the email has been handed to the notifier.
        """
        account = await self.accounts.find_by_email(email)
        if account is None:
            return Err(NotFoundError("email"))

        code = self.tokens.issue_reset_code()
        expires_at = self.clock() + timedelta(seconds=self.code_expire_seconds)
        await self.accounts.update_verification_token(
            account.id, await self.hasher.hash(code), expires_at.isoformat()
        )

        subject, body = _reset_code_message(account, code)
        await self.notifier.send(self.sender, account.email, subject, body)
        logger.info("Reset code sent for account %s", account.id)
        return Ok(True)


@dataclass
class ResetCodeVerificationFlow:
    accounts: ResetCodeAccounts
    hasher: SecretHasher
    tokens: TokenIssuer
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def verify_reset_code(self, email: str, forget_password_code: str) -> Result[str]:
        """Exchange a valid reset code for a recovery token.

        The code is consumed on success: the stored hash is cleared before the
        token is issued, so the same code fails the second time.
        """
        account = await self.accounts.find_by_email(email)
        if account is None:
            return Err(NotFoundError("email"))

        matches = await self.hasher.compare(forget_password_code, account.verification_token or "")
        if not matches or self._expired(account):
            return Err(InvalidForgetCodeError())

        await self.accounts.update_verification_token(account.id, None)
        token = self.tokens.issue(account.id)
        await self.accounts.update_access_token(account.id, token)
        logger.info("Reset code accepted for account %s", account.id)
        return Ok(token)

    def _expired(self, account: Account) -> bool:
        if not account.verification_token_expires_at:
            return False
        return datetime.fromisoformat(account.verification_token_expires_at) <= self.clock()


@dataclass
class ChangePasswordFlow:
    accounts: ChangePasswordAccounts
    hasher: SecretHasher

    async def change_password(self, account_id: str, password: str) -> Result[bool]:
        """Set a new password. The account's current access token stops being accepted."""
        account = await self.accounts.find_by_id(account_id)
        if account is None:
            return Err(NotFoundError("id"))
        await self.accounts.update_password(account.id, await self.hasher.hash(password))
        logger.info("Password changed for account %s", account.id)
        return Ok(True)


def _reset_code_message(account: Account, code: str) -> tuple[str, str]:
    subject = f"{account.full_name}, here is your code"
    body = (
        f"Hello {account.full_name},\n\n"
        "We received a request to reset the password of your PetJournal account.\n\n"
        f"{code}\n\n"
        "Enter this code to finish resetting your password.\n"
        "Thank you for helping us keep your account secure.\n\n"
        "The PetJournal Team\n"
    )
    return subject, body
