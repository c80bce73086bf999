"""Unit tests for auth/tokens.py -- JWT issuing and reset codes."""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.errors import SigningError
from auth.tokens import TokenIssuer


def test_issue_binds_subject(issuer):
    token = issuer.issue("a@x.com")
    assert issuer.decode(token)["sub"] == "a@x.com"


def test_expiry_is_derived_from_now(issuer):
    now = datetime(2030, 1, 1, tzinfo=timezone.utc)
    token = issuer.issue("a@x.com", now=now)

    claims = jwt.get_unverified_claims(token)
    assert claims["iat"] == int(now.timestamp())
    assert claims["exp"] == int((now + timedelta(seconds=3600)).timestamp())


def test_tokens_issued_in_same_second_differ(issuer):
    now = datetime(2030, 1, 1, tzinfo=timezone.utc)
    first = issuer.issue("a@x.com", now=now)
    second = issuer.issue("a@x.com", now=now)

    assert first != second
    first_claims = jwt.get_unverified_claims(first)
    second_claims = jwt.get_unverified_claims(second)
    assert first_claims["exp"] == second_claims["exp"]
    assert first_claims["jti"] != second_claims["jti"]


def test_expired_token_does_not_decode(issuer):
    long_ago = datetime.now(timezone.utc) - timedelta(hours=2)
    assert issuer.decode(issuer.issue("a@x.com", now=long_ago)) is None


def test_token_signed_with_other_key_does_not_decode(issuer):
    other = TokenIssuer(secret_key="another-key-" + "x" * 32)
    assert issuer.decode(other.issue("a@x.com")) is None


def test_garbage_does_not_decode(issuer):
    assert issuer.decode("not.a.jwt") is None


def test_missing_key_raises_signing_error():
    with pytest.raises(SigningError):
        TokenIssuer(secret_key="").issue("a@x.com")


def test_unknown_algorithm_raises_signing_error():
    with pytest.raises(SigningError):
        TokenIssuer(secret_key="k" * 32, algorithm="NOPE").issue("a@x.com")


def test_reset_code_is_numeric_with_configured_length():
    issuer = TokenIssuer(secret_key="k" * 32, reset_code_length=8)
    code = issuer.issue_reset_code()
    assert len(code) == 8
    assert code.isdigit()


def test_reset_codes_vary(issuer):
    codes = {issuer.issue_reset_code() for _ in range(20)}
    assert len(codes) > 1
