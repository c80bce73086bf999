"""
auth/errors.py -- Result type and error taxonomy for the credential flows.

Two kinds of failure, kept strictly apart:

  Domain outcomes (wrong password, wrong code, unknown account, duplicate
  registration) are VALUES. Flows return Err(<DomainError>) so callers can
  branch on them without try/except and without leaking stack detail.

  System failures (bcrypt rejecting input, missing signing key, SMTP down)
  are EXCEPTIONS deriving from CredentialError. Flows never catch them; they
  propagate to the HTTP layer, which logs them and answers 500.

Ok is truthy and Err is falsy, so `if not result:` reads naturally at call
sites that only care whether the flow succeeded.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Domain errors (returned, never raised)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DomainError:
    code: str
    message: str


@dataclass(frozen=True)
class NotFoundError(DomainError):
    """No account matches the given field (e.g. field="email")."""

    field: str = ""

    def __init__(self, field: str) -> None:
        object.__setattr__(self, "code", "not_found")
        object.__setattr__(self, "message", f"Not found: {field}")
        object.__setattr__(self, "field", field)


@dataclass(frozen=True)
class InvalidCredentialError(DomainError):
    code: str = "bad_credentials"
    message: str = "Invalid email or password."


@dataclass(frozen=True)
class InvalidForgetCodeError(InvalidCredentialError):
    code: str = "invalid_forget_code"
    message: str = "Invalid forget password code."


@dataclass(frozen=True)
class ConflictError(DomainError):
    code: str = "conflict"
    message: str = "An account with that email or phone already exists."


# ---------------------------------------------------------------------------
# Tagged result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: DomainError

    def __bool__(self) -> bool:
        return False


Result = Union[Ok[T], Err]


# ---------------------------------------------------------------------------
# Fatal errors (raised)
# ---------------------------------------------------------------------------


class CredentialError(Exception):
    """Base class for failures of a cryptographic or delivery primitive."""


class HashingError(CredentialError):
    """bcrypt rejected the secret, the cost factor, or the stored hash."""


class SigningError(CredentialError):
    """The signing key is missing or python-jose refused to sign."""


class NotificationError(CredentialError):
    """The notification could not be delivered."""
