"""
Account service — application entry point.

Run with ``python main.py`` or ``uvicorn main:create_app --factory``.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import register_middleware
from auth.password import PasswordHasher
from auth.routes import router as auth_router
from auth.service import AccountService
from auth.store import CredentialStore
from auth.tokens import TokenIssuer
from config.settings import Settings
from database.session import Database

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "asyncio", "aiosqlite"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def build_account_service(settings: Settings, database: Database) -> AccountService:
    return AccountService(
        store=CredentialStore(database.session_factory),
        hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        issuer=TokenIssuer(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expiry_seconds=settings.jwt_expiry_seconds,
        ),
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings)
    database = Database(settings)

    app = FastAPI(
        title="Account Service",
        version="1.0.0",
        description="User registration, login and deletion.",
    )
    app.state.settings = settings
    app.state.database = database
    app.state.account_service = build_account_service(settings, database)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)

    # Routes
    app.include_router(auth_router)

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    @app.on_event("startup")
    async def on_startup():
        if not settings.jwt_secret:
            logger.warning("JWT_SECRET not set, logins will fail until a signing secret is configured")
        if settings.db_create_tables:
            await database.create_tables()
        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        await database.dispose()

    return app


if __name__ == "__main__":
    _settings = Settings()
    uvicorn.run(
        create_app(_settings),
        host=_settings.host,
        port=_settings.port,
        log_level="debug" if _settings.debug else "info",
    )
