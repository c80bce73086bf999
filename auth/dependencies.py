"""
auth/dependencies.py -- FastAPI Depends() helpers for bearer-token auth.

A request is authenticated when its Authorization: Bearer <token> header
carries a JWT that:
  1. verifies against the signing key and has not expired, and
  2. is still the access token stored on the account it names.

Check 2 means only the latest token per account is honoured: a new login,
a reset-code verification or a password change makes older tokens useless.

The subject is an email for login tokens and an account id for recovery
tokens; both are resolved here.

Layer rule: no imports from core/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import hmac

from fastapi import HTTPException, Request

from auth.models import Account
from auth.store import AccountStore
from auth.tokens import TokenIssuer


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:] or None
    return None


async def try_get_current_account(request: Request) -> Account | None:
    """Return the Account the bearer token belongs to, or None. Never raises."""
    token = _bearer_token(request)
    if not token:
        return None

    tokens: TokenIssuer = request.app.state.token_issuer
    payload = tokens.decode(token)
    if payload is None:
        return None

    account_store: AccountStore = request.app.state.account_store
    subject = payload["sub"]
    account = await account_store.find_by_email(subject) or await account_store.find_by_id(subject)
    if account is None or not account.access_token:
        return None
    if not hmac.compare_digest(account.access_token.encode(), token.encode()):
        return None
    return account


async def get_current_account(request: Request) -> Account:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.patch("/protected")
        async def route(account: Account = Depends(get_current_account)): ...
    """
    account = await try_get_current_account(request)
    if account is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return account
