"""
Account error taxonomy.

Each error carries a short, caller-safe message.  Driver and signing
library errors are chained as ``__cause__`` and only ever logged.
"""

from __future__ import annotations


class AccountError(Exception):
    """Base class for every failure raised by the account components."""


class ConflictError(AccountError):
    """The username is already registered."""


class NotFoundError(AccountError):
    """No account exists for the given username."""


class UnauthorizedError(AccountError):
    """The password does not match the stored hash."""


class StoreError(AccountError):
    """The credential store could not complete the operation."""


class SigningError(AccountError):
    """A session token could not be signed."""


class InvalidTokenError(AccountError):
    """A session token failed signature or expiry checks."""
