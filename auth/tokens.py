"""
Session token creation and verification.

Tokens are JWTs signed with PyJWT.  They carry the user id and an expiry,
and nothing about issued tokens is remembered here.  The secret comes from
``Settings.jwt_secret`` (env var: ``JWT_SECRET``).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from auth.exceptions import InvalidTokenError, SigningError

logger = logging.getLogger(__name__)


class TokenIssuer:
    def __init__(self, secret: str, algorithm: str = "HS256", expiry_seconds: int = 86400) -> None:
        self._secret = secret
        self.algorithm = algorithm
        self.expiry_seconds = expiry_seconds

    def issue(self, user_id: int) -> str:
        """Create a signed token containing ``user_id`` and expiry."""
        if not self._secret:
            raise SigningError("signing secret is not configured")

        now = datetime.now(timezone.utc)
        payload = {
            "id": user_id,
            "sub": str(user_id),
            "iat": now,
            "exp": now + timedelta(seconds=self.expiry_seconds),
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError, NotImplementedError) as exc:
            raise SigningError("token signing failed") from exc

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Verify signature and expiry and return the claims.

        Raises ``InvalidTokenError`` on any failure.
        """
        if not self._secret:
            raise InvalidTokenError("signing secret is not configured")
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "id"]},
            )
        except jwt.PyJWTError as exc:
            logger.debug("Rejected token: %s", exc)
            raise InvalidTokenError("invalid or expired token") from exc
