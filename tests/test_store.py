"""
Tests for the SQLAlchemy-backed credential store.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from auth.exceptions import ConflictError, StoreError
from auth.store import CredentialStore, UserRecord
from database.models import User


async def _count_users(database, username: str) -> int:
    async with database.session_factory() as session:
        result = await session.execute(
            select(func.count()).select_from(User).where(User.username == username)
        )
        return result.scalar_one()


class TestCredentialStore:
    @pytest.mark.asyncio
    async def test_create_and_find(self, store):
        user_id = await store.create("alice", "$2b$04$hash")
        record = await store.find_by_username("alice")

        assert record == UserRecord(id=user_id, username="alice", password_hash="$2b$04$hash")

    @pytest.mark.asyncio
    async def test_find_missing_returns_none(self, store):
        assert await store.find_by_username("nobody") is None

    @pytest.mark.asyncio
    async def test_ids_are_assigned_by_store(self, store):
        first = await store.create("a", "h1")
        second = await store.create("b", "h2")
        assert isinstance(first, int)
        assert second > first

    @pytest.mark.asyncio
    async def test_duplicate_username_raises_conflict(self, store, database):
        await store.create("alice", "h1")
        with pytest.raises(ConflictError):
            await store.create("alice", "h2")

        assert await _count_users(database, "alice") == 1

    @pytest.mark.asyncio
    async def test_concurrent_duplicates_leave_one_row(self, store, database):
        results = await asyncio.gather(
            store.create("bob", "h1"),
            store.create("bob", "h2"),
            return_exceptions=True,
        )

        assert sum(isinstance(r, int) for r in results) == 1
        assert sum(isinstance(r, ConflictError) for r in results) == 1
        assert await _count_users(database, "bob") == 1

    @pytest.mark.asyncio
    async def test_username_is_matched_literally(self, store):
        await store.create("alice", "h")
        assert await store.find_by_username("alice' OR '1'='1") is None

    @pytest.mark.asyncio
    async def test_delete_existing(self, store):
        user_id = await store.create("carol", "h")
        assert await store.delete_by_id(user_id) == 1
        assert await store.find_by_username("carol") is None

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self, store):
        assert await store.delete_by_id(999_999) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", [0, -1, 2**31, 2**63, 10**30])
    async def test_delete_out_of_range_id_is_noop(self, store, user_id):
        await store.create("alice", "h")
        assert await store.delete_by_id(user_id) == 0
        assert await store.find_by_username("alice") is not None

    @pytest.mark.asyncio
    async def test_delete_out_of_range_skips_the_database(self):
        session_factory = MagicMock()
        store = CredentialStore(session_factory)

        assert await store.delete_by_id(2**63) == 0
        session_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_overflow_becomes_store_error(self):
        session = MagicMock()
        session.__aenter__ = AsyncMock(return_value=session)
        session.__aexit__ = AsyncMock(return_value=False)
        session.execute = AsyncMock(side_effect=OverflowError("Python int too large to convert to SQLite INTEGER"))
        store = CredentialStore(MagicMock(return_value=session))

        with pytest.raises(StoreError) as excinfo:
            await store.delete_by_id(5)
        assert isinstance(excinfo.value.__cause__, OverflowError)

    @pytest.mark.asyncio
    async def test_ids_not_reused_after_delete(self, store):
        first = await store.create("dave", "h")
        await store.delete_by_id(first)
        second = await store.create("erin", "h")
        assert second > first

    @pytest.mark.asyncio
    async def test_driver_failure_becomes_store_error(self):
        session_factory = MagicMock(side_effect=OperationalError("SELECT 1", {}, Exception("down")))
        store = CredentialStore(session_factory)

        with pytest.raises(StoreError) as excinfo:
            await store.find_by_username("alice")
        assert isinstance(excinfo.value.__cause__, OperationalError)

        with pytest.raises(StoreError):
            await store.delete_by_id(1)

        with pytest.raises(StoreError):
            await store.create("alice", "h")
