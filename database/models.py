"""
SQLAlchemy ORM models for the account store.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase

USERNAME_MAX_LENGTH = 64
# Largest value a portable INTEGER primary key can hold (PostgreSQL int4)
USER_ID_MAX = 2**31 - 1


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"
    # SQLite AUTOINCREMENT keeps ids of deleted rows from being handed out again
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(USERNAME_MAX_LENGTH), unique=True, nullable=False)
    password_hash = Column("password", String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"
