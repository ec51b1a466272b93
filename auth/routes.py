"""
Auth API routes — register, login, delete.

Failure bodies are generic; the underlying cause is only logged.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.dependencies import get_account_service
from auth.exceptions import AccountError, ConflictError, NotFoundError, UnauthorizedError
from auth.password import MAX_PASSWORD_BYTES
from auth.service import AccountService, normalize_username

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


# ── Request / response schemas ─────────────────────────────────────────


class CredentialsRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("username")
    @classmethod
    def username_is_valid(cls, value: str) -> str:
        # blank or over-long once canonicalised
        normalize_username(value)
        return value

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class DeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="userId")


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken")


class DeleteResponse(BaseModel):
    message: str
    deleted: int


def _error(status_code: int, key: str, text: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={key: text})


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/register", response_model=MessageResponse)
async def register(
    req: CredentialsRequest,
    service: AccountService = Depends(get_account_service),
) -> Any:
    """Register a new user."""
    try:
        await service.register(req.username, req.password)
    except ConflictError:
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "error",
            "Error registering the user: username already exists",
        )
    except (AccountError, ValueError):
        logger.exception("Registration failed")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "error", "Error registering the user")

    return {"message": "User registered"}


@router.post("/login", response_model=TokenResponse)
async def login(
    req: CredentialsRequest,
    service: AccountService = Depends(get_account_service),
) -> Any:
    """Login with username + password."""
    try:
        token = await service.authenticate(req.username, req.password)
    except NotFoundError:
        return _error(status.HTTP_404_NOT_FOUND, "message", "User not found")
    except UnauthorizedError:
        return _error(status.HTTP_401_UNAUTHORIZED, "message", "Invalid password")
    except (AccountError, ValueError):
        logger.exception("Login failed")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "error", "Error logging in")

    return {"accessToken": token}


@router.delete("/delete", response_model=DeleteResponse)
async def delete_user(
    req: DeleteRequest,
    service: AccountService = Depends(get_account_service),
) -> Any:
    """Delete a user by id.  Missing ids are not an error."""
    try:
        deleted = await service.delete(req.user_id)
    except AccountError:
        logger.exception("Delete of user %s failed", req.user_id)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "error", "Error deleting the user")

    return {"message": "User deleted", "deleted": deleted}
