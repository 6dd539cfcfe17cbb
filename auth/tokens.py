"""
auth/tokens.py -- JWT issuance and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with the configured key and
       carry sub (user id), username, email, a fresh jti, iss, aud, iat and
       exp. Lifetime is fixed by TokenConfig (8 hours by default).

  Verification: decode() checks signature, issuer, audience and expiry and
       returns None on any failure. The auth dependency turns None into a 401.

  Config: TokenConfig is passed to the constructor. Nothing in this module
       reads settings at import time, so tests can issue tokens with any key.

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from jose import JWTError, jwt

from core.config import TokenConfig

if TYPE_CHECKING:
    from auth.models import User

logger = logging.getLogger("employeeauth.tokens")

ALGORITHM = "HS256"

# Claims a token must carry to be bound to an identity.
_REQUIRED_CLAIMS = ("sub", "username", "email", "jti", "exp")


class TokenIssuer:
    """Mints and verifies signed, time-bounded bearer tokens."""

    def __init__(self, config: TokenConfig) -> None:
        self._config = config

    @property
    def expire_seconds(self) -> int:
        return self._config.expire_seconds

    def issue(self, user: User) -> str:
        """Encode a signed JWT for an authenticated user."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "username": user.username,
            "email": user.email,
            "jti": str(uuid.uuid4()),
            "iss": self._config.issuer,
            "aud": self._config.audience,
            "iat": now,
            "exp": now + timedelta(seconds=self._config.expire_seconds),
        }
        return jwt.encode(payload, self._config.key, algorithm=ALGORITHM)

    def decode(self, token: str) -> dict | None:
        """Decode and verify a JWT. Returns the payload dict or None on any failure."""
        try:
            payload = jwt.decode(
                token,
                self._config.key,
                algorithms=[ALGORITHM],
                audience=self._config.audience,
                issuer=self._config.issuer,
            )
        except JWTError:
            return None
        if any(claim not in payload for claim in _REQUIRED_CLAIMS):
            logger.warning("Rejected token missing required claims")
            return None
        return payload
