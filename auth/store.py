"""
Credential store — the only code that reads or writes ``users`` rows.

Every call opens its own session and commits before returning.  All SQL
goes through SQLAlchemy bound parameters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth.exceptions import ConflictError, StoreError
from database.models import USER_ID_MAX, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserRecord:
    """Detached copy of a stored user, for the account service only."""

    id: int
    username: str
    password_hash: str


class CredentialStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, username: str, password_hash: str) -> int:
        """Insert a user and return the id the database assigned."""
        try:
            async with self._session_factory() as session:
                user = User(username=username, password_hash=password_hash)
                session.add(user)
                await session.commit()
                return user.id
        except IntegrityError as exc:
            if await self._username_taken(username):
                raise ConflictError("username already exists") from exc
            raise StoreError("insert rejected by the database") from exc
        except (SQLAlchemyError, OSError, OverflowError) as exc:
            raise StoreError("could not create user") from exc

    async def find_by_username(self, username: str) -> Optional[UserRecord]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(User).where(User.username == username))
                user = result.scalar_one_or_none()
        except (SQLAlchemyError, OSError, OverflowError) as exc:
            raise StoreError("could not look up user") from exc

        if user is None:
            return None
        return UserRecord(id=user.id, username=user.username, password_hash=user.password_hash)

    async def delete_by_id(self, user_id: int) -> int:
        """Delete a user; returns the number of rows removed (0 if absent)."""
        # ids are assigned from 1 and never exceed the column range
        if not 1 <= user_id <= USER_ID_MAX:
            return 0
        try:
            async with self._session_factory() as session:
                result = await session.execute(delete(User).where(User.id == user_id))
                await session.commit()
                return result.rowcount
        except (SQLAlchemyError, OSError, OverflowError) as exc:
            raise StoreError("could not delete user") from exc

    async def _username_taken(self, username: str) -> bool:
        try:
            return await self.find_by_username(username) is not None
        except StoreError:
            logger.warning("Could not re-check username after integrity error", exc_info=True)
            return False
