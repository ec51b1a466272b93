"""
FastAPI dependencies for the auth routes.
"""

from __future__ import annotations

from fastapi import Request

from auth.service import AccountService


def get_account_service(request: Request) -> AccountService:
    """Return the ``AccountService`` built once in ``create_app``."""
    return request.app.state.account_service
