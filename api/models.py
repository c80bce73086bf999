"""
API request and response models for the guardian REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Input-shape validation (missing fields, malformed email, password mismatch)
happens here, so the credential flows only ever see well-formed input.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from auth.models import Account

# bcrypt only looks at the first 72 bytes and bcrypt >= 4.1 refuses longer
# input outright. Rejecting it here keeps that a 422 instead of a 500.
_PASSWORD_MAX = 72


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class _PasswordConfirmation(BaseModel):
    password: str = Field(min_length=6, max_length=_PASSWORD_MAX)
    password_confirmation: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.password_confirmation:
            raise ValueError("password_confirmation does not match password")
        return self


class SignUpRequest(_PasswordConfirmation):
    """Request body for POST /api/v1/signup.

    Names, email and phone are trimmed. Passwords are taken exactly as
    typed, the same way login and change-password read them.
    """

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(min_length=8, max_length=32, pattern=r"^\+?[0-9]+$")

    @field_validator("first_name", "last_name", "email", "phone", mode="before")
    @classmethod
    def strip_whitespace(cls, value):
        return value.strip() if isinstance(value, str) else value


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/login."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=_PASSWORD_MAX)


class ForgetPasswordRequest(BaseModel):
    """Request body for POST /api/v1/forget-password."""

    email: EmailStr


class WaitingCodeRequest(BaseModel):
    """Request body for POST /api/v1/waiting-code."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    forget_password_code: str = Field(min_length=1, max_length=32)


class ChangePasswordRequest(_PasswordConfirmation):
    """Request body for PATCH /api/v1/change-password."""


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class AccountResponse(BaseModel):
    """Public view of an account. Never carries hashes or tokens."""

    model_config = ConfigDict(frozen=True)

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            first_name=account.first_name,
            last_name=account.last_name,
            email=account.email,
            phone=account.phone,
        )


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "bearer"
    expires_in: int


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class WaitingCodeResponse(MessageResponse):
    """Success body for POST /waiting-code: carries the recovery token."""

    access_token: str
    token_type: str = "bearer"


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
