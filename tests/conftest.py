"""
Shared fixtures: a throwaway SQLite database per test and an app wired to it.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from auth.password import PasswordHasher
from auth.service import AccountService
from auth.store import CredentialStore
from auth.tokens import TokenIssuer
from config.settings import Settings
from database.session import Database
from main import create_app

TEST_SECRET = "test-signing-secret-with-enough-length"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'accounts.db'}",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
    )


@pytest_asyncio.fixture
async def database(settings):
    db = Database(settings)
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
def store(database) -> CredentialStore:
    return CredentialStore(database.session_factory)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(secret=TEST_SECRET)


@pytest.fixture
def service(store, hasher, issuer) -> AccountService:
    return AccountService(store=store, hasher=hasher, issuer=issuer)


@pytest_asyncio.fixture
async def app(settings):
    application = create_app(settings)
    await application.state.database.create_tables()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
