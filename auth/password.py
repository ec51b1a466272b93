"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

import secrets

import bcrypt

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """bcrypt hasher with a fixed cost factor."""

    def __init__(self, rounds: int = 8) -> None:
        self.rounds = rounds
        # Verified against when a username is unknown, so the miss costs a full bcrypt round
        self._dummy_hash = self.hash(secrets.token_urlsafe(32))

    def hash(self, password: str) -> str:
        """Hash a password with a fresh random salt."""
        raw = password.encode()
        if len(raw) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password exceeds {MAX_PASSWORD_BYTES} bytes")
        return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison against a bcrypt hash."""
        raw = password.encode()
        if len(raw) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(raw, password_hash.encode())
        except (ValueError, TypeError):
            return False

    def dummy_verify(self, password: str) -> bool:
        self.verify(password, self._dummy_hash)
        return False
