"""
Account service — register, authenticate and delete users.

Composes the credential store, password hasher and token issuer.  Keeps no
state between calls; bcrypt work runs in a worker thread so the event loop
stays free while a hash is computed.
"""

from __future__ import annotations

import asyncio
import logging
import unicodedata

from auth.exceptions import ConflictError, NotFoundError, UnauthorizedError
from auth.password import PasswordHasher
from auth.store import CredentialStore
from auth.tokens import TokenIssuer
from database.models import USERNAME_MAX_LENGTH

logger = logging.getLogger(__name__)


def normalize_username(raw: str) -> str:
    """
    Canonical form used for storage, uniqueness and lookup.

    NFKC-normalised, surrounding whitespace stripped, case-folded, so
    ``" Alice "`` and ``"alice"`` name the same account.  The length limit
    applies to this form, since NFKC and case folding can both lengthen a
    name.
    """
    username = unicodedata.normalize("NFKC", raw).strip().casefold()
    if not username:
        raise ValueError("username must not be blank")
    if len(username) > USERNAME_MAX_LENGTH:
        raise ValueError(f"username must be at most {USERNAME_MAX_LENGTH} characters")
    return username


class AccountService:
    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.issuer = issuer

    async def register(self, username: str, password: str) -> int:
        """Hash the password and create the user.  Returns the new id."""
        username = normalize_username(username)
        password_hash = await asyncio.to_thread(self.hasher.hash, password)
        try:
            user_id = await self.store.create(username, password_hash)
        except ConflictError:
            logger.warning("Registration rejected, username %r already exists", username)
            raise
        logger.info("Registered user %s (%s)", username, user_id)
        return user_id

    async def authenticate(self, username: str, password: str) -> str:
        """Check the credentials and return a signed session token."""
        username = normalize_username(username)
        user = await self.store.find_by_username(username)

        if user is None:
            await asyncio.to_thread(self.hasher.dummy_verify, password)
            logger.warning("Login failed, unknown user %r", username)
            raise NotFoundError("User not found")

        if not await asyncio.to_thread(self.hasher.verify, password, user.password_hash):
            logger.warning("Login failed, invalid password for user %s", user.id)
            raise UnauthorizedError("Invalid password")

        token = self.issuer.issue(user.id)
        logger.info("Login: %s (%s)", user.username, user.id)
        return token

    async def delete(self, user_id: int) -> int:
        """
        Delete a user by id and return the number of rows removed.

        Any caller may delete any id; there is no ownership check.
        """
        deleted = await self.store.delete_by_id(user_id)
        logger.info("Delete user %s: %d row(s) removed", user_id, deleted)
        return deleted
