"""
auth/tokens.py -- Signed access tokens and one-time reset codes.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry the
       subject (account email after login, account id after a reset-code
       verification), issued-at, expiry and a random jti. Expiry is computed
       from an explicit `now`, so a token's lifetime is deterministic and
       replay is bounded in time. The jti keeps two tokens issued in the same
       second distinct, which the stored-token check relies on.

  decode() returns None on any failure -- the HTTP layer turns that into a
       401. The credential flows never decode tokens.

  Reset codes: short numeric codes the account holder types from an email.
       secrets.choice over digits gives uniform, unpredictable codes. They are
       low-entropy by design, so only their bcrypt hash is ever stored and
       they expire quickly.

Layer rule: no imports from api/ or core/. The secret key is passed in by
whoever constructs the issuer (api/main.py lifespan).
"""

from __future__ import annotations

import logging
import secrets
import string
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from jose.exceptions import JOSEError

from auth.errors import SigningError

logger = logging.getLogger("guardian.auth")


class TokenIssuer:
    """Creates signed, time-bound identity tokens bound to a subject claim.

    Usage:
        issuer = TokenIssuer(secret_key=settings.secret_key, expire_seconds=3600)
        token = issuer.issue("a@x.com")
        issuer.decode(token)["sub"]  # -> "a@x.com"
    """

    def __init__(
        self,
        secret_key: str,
        expire_seconds: int = 3600,
        algorithm: str = "HS256",
        reset_code_length: int = 6,
    ) -> None:
        self._secret_key = secret_key
        self.expire_seconds = expire_seconds
        self.algorithm = algorithm
        self.reset_code_length = reset_code_length

    def issue(self, subject: str, now: datetime | None = None) -> str:
        """Encode a signed JWT for subject, expiring expire_seconds after now.

        Raises SigningError if no key is configured or python-jose refuses to
        sign with it.
        """
        if not self._secret_key:
            raise SigningError("signing key is not configured")
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.expire_seconds),
            "jti": secrets.token_urlsafe(16),
        }
        try:
            return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)
        except JOSEError as exc:
            logger.error("Token signing failed (algorithm=%s)", self.algorithm)
            raise SigningError(str(exc)) from exc

    def decode(self, token: str) -> dict | None:
        """Verify signature and expiry. Returns the payload dict or None."""
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None
        if not payload.get("sub"):
            return None
        return payload

    def issue_reset_code(self) -> str:
        """Return a fresh numeric one-time code, e.g. "042917"."""
        return "".join(secrets.choice(string.digits) for _ in range(self.reset_code_length))
